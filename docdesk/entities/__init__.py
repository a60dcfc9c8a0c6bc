from docdesk.entities.template import Template
from docdesk.entities.proposal import Proposal, ProposalStatus
from docdesk.entities.snapshot import Snapshot, SnapshotKind
from docdesk.entities.app_settings import AppSettings
from docdesk.entities.player import Player
from docdesk.entities.game_session import GameSession
from docdesk.entities.leaderboard_entry import LeaderboardEntry

__all__ = [
    "Template", "Proposal", "ProposalStatus",
    "Snapshot", "SnapshotKind", "AppSettings",
    "Player", "GameSession", "LeaderboardEntry",
]
