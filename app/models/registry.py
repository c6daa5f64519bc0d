# app/models/registry.py
# Import every model so Base.metadata knows all tables (alembic, tests, seed script).
from app.models.account import Account
from app.models.activity_log import ActivityLog
from app.models.bin import Bin, UserBin
from app.models.knowledge_base import KnowledgeBaseItem
from app.models.permission import PermissionDefinition, UserPermission
from app.models.role import Role, UserRole
from app.models.team import Team, UserTeam
from app.models.ticket import Ticket
from app.models.user import User
