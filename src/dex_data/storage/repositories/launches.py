"""Token launch adapters (launchpad sales and their contributions)."""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.repositories.base import EntityAdapter


class LaunchAdapter(EntityAdapter):
    kind = EntityKind.LAUNCH
    table = "launch"
    cursor_field = "id"


class LaunchContributionAdapter(EntityAdapter):
    kind = EntityKind.LAUNCH_CONTRIBUTION
    table = "launch_contribution"
    cursor_field = "id"
