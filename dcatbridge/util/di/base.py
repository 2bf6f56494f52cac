from dishka import Provider as DishkaProvider

from dcatbridge.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all DI providers; dependencies default to the unit-of-work scope."""

    scope = Scope.UOW
