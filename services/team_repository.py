"""
Team Repository - field crews and their members.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from database.models import Team
from services.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TeamRepository(BaseRepository):
    """Repository for team database operations."""

    model = Team
    entity_type = 'team'

    UPDATABLE_FIELDS = (
        'name', 'description', 'team_type', 'leader_id', 'leader_name',
        'members', 'status',
    )

    def create(self, data: Dict[str, Any]) -> Dict:
        team = Team(
            company_id=self.company_id,
            name=data.get('name', ''),
            description=data.get('description'),
            team_type=data.get('team_type', 'operations'),
            leader_id=data.get('leader_id'),
            leader_name=data.get('leader_name'),
            members=data.get('members', []),
            status=data.get('status', 'active'),
            created_by=self.user_id
        )
        self.session.add(team)
        self.session.flush()

        self._log_event(
            entity_id=team.id,
            event_type='CREATED',
            description=f"Team '{team.name}' was created",
            metadata={'members': len(team.members or [])}
        )
        logger.info(f"Created team: {team.id}")
        return team.to_dict()

    def get(self, team_id: str) -> Optional[Dict]:
        team = self._get(team_id)
        return team.to_dict() if team else None

    def list(self, active_only: bool = False) -> List[Dict]:
        query = self._query()
        if active_only:
            query = query.filter(Team.status == 'active')
        return [t.to_dict() for t in query.order_by(Team.name).all()]

    def update(self, team_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        team = self._get(team_id)
        if not team:
            return None

        changes = self._apply_updates(team, data, self.UPDATABLE_FIELDS)
        team.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=team_id,
                event_type='UPDATED',
                description=f"Team '{team.name}' was updated",
                metadata={'fields': sorted(changes)}
            )
        return team.to_dict()

    def delete(self, team_id: str) -> bool:
        team = self._get(team_id)
        if not team:
            return False

        name = team.name
        self.session.delete(team)
        self.session.flush()
        self._log_event(
            entity_id=team_id,
            event_type='DELETED',
            description=f"Team '{name}' was deleted"
        )
        return True

    def add_member(self, team_id: str, member: Dict[str, Any]) -> Dict:
        """Add a member ({id, name, role}); adding an existing id is a no-op."""
        team = self._get_or_raise(team_id)
        members = list(team.members or [])
        if any(m.get('id') == member.get('id') for m in members):
            return team.to_dict()

        members.append(member)
        team.members = members
        team.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=team_id,
            event_type='MEMBER_ADDED',
            description=f"{member.get('name') or member.get('id')} joined team '{team.name}'",
            metadata={'member_id': member.get('id')}
        )
        return team.to_dict()

    def remove_member(self, team_id: str, member_id: str) -> Dict:
        team = self._get_or_raise(team_id)
        members = [m for m in (team.members or []) if m.get('id') != member_id]
        if len(members) == len(team.members or []):
            return team.to_dict()

        team.members = members
        team.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=team_id,
            event_type='MEMBER_REMOVED',
            description=f"Member {member_id} left team '{team.name}'",
            metadata={'member_id': member_id}
        )
        return team.to_dict()
