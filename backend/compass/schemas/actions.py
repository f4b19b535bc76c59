from pydantic import BaseModel

from compass.models import Commitment, DecisionOutcome, Entry


class CommitmentActionRequest(BaseModel):
    """Commitment to complete or reopen."""
    commitment: Commitment


class DecisionReviewRequest(BaseModel):
    """Record how a decision turned out."""
    entry: Entry
    outcome: DecisionOutcome
