from app.models.user import User
from app.models.player import Player
from app.models.matchup import PlayerMatchup
from app.models.audit_log import AuditLog
