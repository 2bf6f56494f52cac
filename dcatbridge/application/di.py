from dishka import AsyncContainer, Provider, from_context, make_async_container

from dcatbridge.config import Config
from dcatbridge.domain.catalog.util.di import CatalogProvider
from dcatbridge.infrastructure.http.di import HttpProvider
from dcatbridge.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        HttpProvider(),
        CatalogProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
