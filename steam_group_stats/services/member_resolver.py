"""Turns a group identifier or URL into the group's member ids."""

from urllib.parse import urlparse

import structlog

from .cancellation import CancellationToken, OperationCancelled
from .errors import ResolutionError
from .steam_api import SteamApiClient

log = structlog.stdlib.get_logger()


def extract_group_id(raw: str) -> str:
    """Normalize user input to a bare group identifier.

    ``https://steamcommunity.com/groups/foo/members`` becomes ``foo``; anything
    that is not a URL is returned trimmed.
    """
    text = raw.strip()
    if not text.lower().startswith(("http://", "https://")):
        return text

    try:
        segments = [segment for segment in urlparse(text).path.split("/") if segment]
    except ValueError:
        return text

    for index, segment in enumerate(segments[:-1]):
        if segment == "groups":
            return segments[index + 1]
    return text


class MemberResolver:
    """Resolves a group to its ordered list of member ids."""

    def __init__(self, steam_api: SteamApiClient) -> None:
        self._steam_api = steam_api

    async def resolve(self, raw_group: str, token: CancellationToken) -> list[str]:
        """Fetch the member ids of ``raw_group``.

        Returns an empty list, without raising, when the run was cancelled.

        Raises:
            ResolutionError: If the identifier is empty or the member list
                cannot be fetched
        """
        group_id = extract_group_id(raw_group)
        if not group_id:
            raise ResolutionError("Please enter a Steam group ID or URL")

        log.info("Resolving group members", group_id=group_id)

        try:
            return await token.guard(self._steam_api.get_group_members(group_id))
        except OperationCancelled:
            log.info("Member resolution cancelled", group_id=group_id)
            return []
        except Exception as e:
            if token.cancelled:
                log.info("Member resolution cancelled", group_id=group_id)
                return []
            log.error("Member resolution failed", group_id=group_id, error=str(e))
            raise ResolutionError(
                f"Error fetching members of group '{group_id}'",
                group_id=group_id,
                original_error=e,
            ) from e
