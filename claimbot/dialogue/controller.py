"""Slot-filling dialogue controller.

A session starts ``idle`` and the model simply chats. Once the user agrees to
file a claim the session switches to ``collecting``; from then on every message
is run through the slot extractor, and as soon as the claim record is complete
it is sent to the compensation service instead of the model.
"""

from __future__ import annotations

import logging

from claimbot.claims.decision import CompensationDecision, CompensationService, parse_decision
from claimbot.claims.extractor import extract
from claimbot.claims.models import ClaimRecord
from claimbot.core.errors import UpstreamCollaboratorFailure
from claimbot.dialogue.base import ChatEngine, bounded_call
from claimbot.dialogue.prompts import SLOT_FILLING_PROMPT
from claimbot.llm.client import ChatCompletionClient
from claimbot.memory.models import ChatTurn, DialogueMode, Role, SessionState
from claimbot.memory.store import SessionStore

logger = logging.getLogger("claimbot.dialogue")

CLAIM_CONSENT_KEYWORDS = ("yes", "sure", "ok", "file")

ESCALATION_NOTE = (
    "If you would like to discuss this further with a live customer service agent, "
    "please click the customer service icon to connect."
)
CLAIM_ERROR_REPLY = "I encountered an error processing your compensation claim. Please try again."
NO_REPLY = "I'm sorry, I couldn't process your request at this time."


class DialogueController(ChatEngine):
    """Idle/collecting state machine around the slot extractor."""

    name = "slot_filling"

    def __init__(
        self,
        store: SessionStore,
        llm: ChatCompletionClient,
        compensation: CompensationService,
        *,
        max_history_size: int = 20,
        llm_timeout: float = 30.0,
        compensation_timeout: float = 10.0,
    ) -> None:
        self._store = store
        self._llm = llm
        self._compensation = compensation
        self._max_history_size = max_history_size
        self._llm_timeout = llm_timeout
        self._compensation_timeout = compensation_timeout

    @property
    def system_prompt(self) -> str:
        return SLOT_FILLING_PROMPT

    def describe(self) -> str:
        return "Keyword slot-filling with automatic claim submission"

    async def handle_turn(self, session_id: str, message: str) -> str:
        async with self._store.session(session_id) as state:
            self._update_mode(state, message)

            if state.mode is DialogueMode.COLLECTING:
                state.claim = extract(message, state.claim)

            logger.info(
                "Claim state for %s: %s (mode=%s)",
                session_id,
                state.claim.as_dict(),
                state.mode.value,
            )

            if state.claim.is_complete():
                return await self._submit_claim(state)
            return await self._continue_conversation(state, message)

    def _update_mode(self, state: SessionState, message: str) -> None:
        if state.mode is not DialogueMode.IDLE:
            return
        lowered = message.lower()
        if not any(keyword in lowered for keyword in CLAIM_CONSENT_KEYWORDS):
            return

        state.mode = DialogueMode.COLLECTING
        logger.info("Session %s switched to claim collection", state.session_id)
        # Details given before the user agreed to file still count.
        for turn in state.user_turns():
            state.claim = extract(turn.content, state.claim)

    async def _submit_claim(self, state: SessionState) -> str:
        claim = state.claim
        logger.info("All claim data collected for %s, requesting decision", state.session_id)
        try:
            verdict = await bounded_call(
                self._compensation.decide(claim.to_request()),
                self._compensation_timeout,
                "compensation",
            )
            reply = phrase_decision(claim, parse_decision(verdict))
        except Exception:  # noqa: BLE001
            logger.exception("Compensation decision failed for session %s", state.session_id)
            return CLAIM_ERROR_REPLY

        state.reset()
        return reply

    async def _continue_conversation(self, state: SessionState, message: str) -> str:
        state.ensure_system_turn(self.system_prompt)
        state.trim(self._max_history_size)
        turn_start = len(state.transcript)
        state.append(ChatTurn(role=Role.USER, content=message))

        try:
            reply = await bounded_call(self._llm.complete(list(state.transcript)), self._llm_timeout, "llm")
        except UpstreamCollaboratorFailure:
            state.truncate(turn_start)
            raise
        content = reply.content or NO_REPLY
        state.append(ChatTurn(role=Role.ASSISTANT, content=content))
        return content


def phrase_decision(claim: ClaimRecord, decision: CompensationDecision) -> str:
    """Word the decision for the user by comparing approved and requested amounts."""

    if not decision.approved:
        return f"{decision.text}\n\n{ESCALATION_NOTE}"
    if decision.amount is None:
        return decision.text

    approved = decision.amount
    requested = claim.requested_compensation
    issue = claim.issue_type.label
    flight = claim.flight_number

    if approved > requested:
        return (
            f"Great news! Based on your {claim.loyalty_tier.value} rewards status and the circumstances "
            f"of your claim, we're pleased to offer you ${approved} in compensation for your {issue} "
            f"on flight {flight}.\n\n"
            f"This is more than the ${requested} you requested!"
        )
    if approved == requested:
        return (
            "Good news! Your compensation claim has been approved.\n\n"
            f"You will receive ${approved} for your {issue} on flight {flight}."
        )
    return (
        "I've submitted your claim to our automated approval system.\n\n"
        f"Based on our policies, the approved compensation is ${approved} for your {issue} "
        f"on flight {flight}.\n\n"
        f"{ESCALATION_NOTE}"
    )
