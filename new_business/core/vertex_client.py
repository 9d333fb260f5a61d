"""
Google Vertex AI client for drafting client emails.
Wraps Gemini (through LangChain's ChatVertexAI) behind a single
policy + instruction -> HTML call with a deadline.
"""

import concurrent.futures
import logging
import time
from typing import List, Optional, Protocol

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_vertexai import ChatVertexAI
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from new_business.config import Settings, get_settings
from new_business.errors import GenerationError
from new_business.prompts import (
    DEFAULT_DRAFT_INSTRUCTION,
    DRAFT_EMAIL_PROMPT,
    DRAFT_EMAIL_SYSTEM,
)
from new_business.tracker.models import Policy


logger = logging.getLogger(__name__)

MAX_NOTES_IN_PROMPT = 5


class EmailDrafter(Protocol):
    """Anything that can turn a policy and an instruction into an HTML email."""

    def generate_draft(self, policy: Policy, instruction: str) -> str:
        ...


def build_draft_prompt(policy: Policy, instruction: str) -> str:
    """Fill the drafting prompt with the policy context."""
    requirements = "\n".join(
        f"- {r.name} [{r.status.value}]: {r.description}" for r in policy.requirements
    ) or "- (no requirements)"

    notes = "\n".join(
        f"- {c.timestamp}: {c.note}"
        for c in policy.communications_newest_first()[:MAX_NOTES_IN_PROMPT]
    ) or "- (no notes yet)"

    return DRAFT_EMAIL_PROMPT.format(
        instruction=instruction.strip() or DEFAULT_DRAFT_INSTRUCTION,
        client_name=policy.client_name,
        client_email=policy.client_email,
        client_phone=policy.client_phone,
        carrier=policy.carrier.value,
        policy_type=policy.policy_type.value,
        policy_number=policy.policy_number or "not assigned yet",
        effective_date=policy.effective_date,
        follow_up_date=policy.follow_up_date or "none",
        status=policy.status.value,
        requirements=requirements,
        notes=notes,
    )


def _response_text(content) -> str:
    """Flatten a chat response's content, which may be a list of parts."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


def clean_html(text: str) -> str:
    """Strip markdown fences the model sometimes wraps around HTML."""
    text = text.strip()
    if text.startswith("```html"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


class VertexDraftClient:
    """
    Gemini email drafter.
    The chat model is created on first use so the app starts without
    Google Cloud credentials.
    """

    def __init__(self, settings: Optional[Settings] = None, llm: Optional[ChatVertexAI] = None):
        self.settings = settings or get_settings()
        self._llm = llm

    @property
    def llm(self) -> ChatVertexAI:
        if self._llm is None:
            if not self.settings.vertex_configured:
                raise GenerationError("Email drafting is not configured (VERTEX_PROJECT_ID is not set)")
            self._llm = ChatVertexAI(
                model_name=self.settings.gemini_model_id,
                project=self.settings.vertex_project_id,
                location=self.settings.vertex_location,
                temperature=self.settings.draft_temperature,
                max_output_tokens=self.settings.draft_max_output_tokens,
                max_retries=0,
            )
            logger.info(f"Initialized Vertex AI model: {self.settings.gemini_model_id}")
        return self._llm

    def _invoke(self, messages: List[BaseMessage]) -> str:
        """Single model call bounded by the drafting timeout."""
        llm = self.llm
        timeout = self.settings.draft_timeout_seconds
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(llm.invoke, messages)
            response = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as e:
            raise GenerationError(f"No response from the drafting service within {timeout:.0f}s") from e
        except Exception as e:
            raise GenerationError(f"Vertex AI text generation failed: {e}") from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        html = clean_html(_response_text(response.content))
        if not html:
            raise GenerationError("The drafting service returned an empty response")
        return html

    def generate_draft(self, policy: Policy, instruction: str) -> str:
        """
        Draft an HTML email for a policy.

        Args:
            policy: Policy snapshot used as context
            instruction: Free-text request from the agent

        Returns:
            HTML email body

        Raises:
            GenerationError: on configuration, network or provider failure
        """
        messages = [
            SystemMessage(content=DRAFT_EMAIL_SYSTEM),
            HumanMessage(content=build_draft_prompt(policy, instruction)),
        ]

        retrying = Retrying(
            stop=stop_after_attempt(self.settings.draft_max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(GenerationError),
            reraise=True,
        )

        t0 = time.perf_counter()
        html = retrying(self._invoke, messages)
        logger.info(
            f"Drafted email for policy {policy.id} in {time.perf_counter() - t0:.2f}s "
            f"({len(html)} chars)"
        )
        return html


_draft_client: Optional[VertexDraftClient] = None


def get_draft_client() -> VertexDraftClient:
    """Get Vertex AI draft client singleton."""
    global _draft_client
    if _draft_client is None:
        _draft_client = VertexDraftClient()
    return _draft_client
