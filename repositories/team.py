"""
Team member store - the people tasks can be assigned to.
"""

from models import TeamMember, NewTeamMember
from .store import EntityStore, new_id

TEAM_TABLE = "team_members"


class TeamStore(EntityStore[TeamMember]):
    table = TEAM_TABLE
    model = TeamMember

    async def add(self, member: NewTeamMember) -> TeamMember:
        record = member.model_dump(mode="json")
        record["id"] = member.id or f"member_{new_id()}"
        return await self._insert(record)

    async def list(self) -> list[TeamMember]:
        return await self._select(order_by="name")
