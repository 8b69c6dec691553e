import logging
from typing import Any

from content_forge.config import Settings
from content_forge.errors import ConfigError, EmptyResponseError

logger = logging.getLogger(__name__)
PROMPT_LOG_LIMIT = 200
ERROR_LOG_LIMIT = 1000

SYSTEM_INSTRUCTION = (
    "You are an expert AI content creator specializing in niche digital products. "
    "Generate high-quality, structured content based on user input. "
    "Your response MUST be formatted using **Markdown** (Headings: #, ##, Lists: *). "
    "DO NOT include any introductory or concluding conversational filler."
)


class GeminiGenerator:
    """Gemini text generation through its OpenAI-compatible endpoint.

    One call per prompt: fixed system instruction, bounded output, fixed
    temperature, no retries and no streaming.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.model = settings.llm_model
        self._llm: Any | None = None

    async def generate(self, prompt: str) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage

        llm = self._get_llm()
        logger.info("llm.request model=%s prompt=%s", self.model, self._clip(prompt, PROMPT_LOG_LIMIT))
        try:
            response = await llm.ainvoke([SystemMessage(content=SYSTEM_INSTRUCTION), HumanMessage(content=prompt)])
        except Exception as exc:
            logger.error(
                "llm.error model=%s type=%s detail=%s",
                self.model,
                exc.__class__.__name__,
                self._extract_error_detail(exc),
            )
            raise
        text = self._message_text(getattr(response, "content", response))
        if not text:
            raise EmptyResponseError("AI returned an empty response.")
        logger.info("llm.response model=%s chars=%d", self.model, len(text))
        return text

    def _get_llm(self):
        if not self.settings.gemini_api_key:
            raise ConfigError("AI API Key is missing. Check GEMINI_API_KEY environment variable.")
        if self._llm is None:
            from langchain_openai import ChatOpenAI

            self._llm = ChatOpenAI(
                model=self.model,
                api_key=self.settings.gemini_api_key,
                base_url=self.settings.llm_base_url,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
                max_tokens=self.settings.llm_max_output_tokens,
                temperature=self.settings.llm_temperature,
            )
        return self._llm

    @staticmethod
    def _message_text(content: Any) -> str:
        if content is None:
            return ""
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if isinstance(item, dict):
                    parts.append(str(item.get("text", "")))
                else:
                    parts.append(str(item))
            return "\n".join(part for part in parts if part).strip()
        return str(content).strip()

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split()).strip()
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

    def _extract_error_detail(self, exc: Exception) -> str:
        status_code = getattr(exc, "status_code", None)
        message = getattr(exc, "message", None) or str(exc)
        body = getattr(exc, "body", None)
        details = [f"status_code={status_code}" if status_code is not None else ""]
        if body is not None:
            details.append(f"body={body}")
        details.append(f"message={message}")
        return self._clip(" ".join([part for part in details if part]).strip(), ERROR_LOG_LIMIT)
