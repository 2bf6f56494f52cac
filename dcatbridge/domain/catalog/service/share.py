import hmac
import logging

from dcatbridge.domain.catalog.model.resource import Share
from dcatbridge.domain.catalog.port.credential import CredentialProvider
from dcatbridge.domain.catalog.port.share_reader import ShareReader
from dcatbridge.domain.shared.error import NotFoundError
from dcatbridge.domain.shared.service import Service

logger = logging.getLogger(__name__)


class ShareService(Service):
    share_reader: ShareReader
    credentials: CredentialProvider

    async def verify_share(self, share_id: str, share_token: str) -> Share:
        """Return the share if ``share_token`` grants access to it.

        An unknown share and a wrong token are indistinguishable to the caller.

        Raises:
            NotFoundError: If the share does not exist or the token does not match.
            AuthError: If no credential could be obtained for the metadata API.
        """
        credential = await self.credentials.get_valid_credential()
        share = await self.share_reader.get_share(share_id, credential)

        if share is None or not share.url_token:
            raise NotFoundError(f"Share not found: {share_id}")

        if not hmac.compare_digest(share.url_token.encode(), share_token.encode()):
            logger.info("Rejected share %s: token mismatch", share_id)
            raise NotFoundError(f"Share not found: {share_id}")

        return share
