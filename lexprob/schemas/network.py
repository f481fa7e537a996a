"""Pydantic schemas for serializing Bayesian networks."""

from pydantic import BaseModel, Field


class CPTEntry(BaseModel):
    """One row of a conditional probability table."""
    states: list[bool] = Field(description="Parent truth values, in parent order")
    probability: float = Field(ge=0.0, le=1.0)


class NodeSnapshot(BaseModel):
    id: str
    prior: float = Field(ge=0.0, le=1.0)
    parents: list[str] = Field(default_factory=list)
    cpt: list[CPTEntry] = Field(default_factory=list)


class NetworkSnapshot(BaseModel):
    """
    Serializable form of a network.

    Node order is preserved, so a restored network samples and entails
    in the same order as the original.
    """
    strict: bool = False
    nodes: list[NodeSnapshot] = Field(default_factory=list)
