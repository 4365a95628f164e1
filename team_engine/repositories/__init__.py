# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Both stores expose the same method set."""
from team_engine.repositories.memory_store import InMemoryTeamStore
from team_engine.repositories.sql_store import SqlTeamStore

__all__ = ["InMemoryTeamStore", "SqlTeamStore"]
