"""Pydantic schemas for lexprob snapshots."""

from lexprob.schemas.network import CPTEntry, NetworkSnapshot, NodeSnapshot

__all__ = ["CPTEntry", "NetworkSnapshot", "NodeSnapshot"]
