import logging

from content_forge.errors import QuotaExceededError
from content_forge.quota.gate import QuotaGate
from content_forge.workflow.document import DocumentPipeline

logger = logging.getLogger(__name__)


class GenerateService:
    def __init__(self, gate: QuotaGate, pipeline: DocumentPipeline) -> None:
        self.gate = gate
        self.pipeline = pipeline

    async def generate(
        self,
        user_id: str,
        topic: str,
        doc_type: str,
        tone: str,
        sections_count: int,
    ) -> dict:
        decision = await self.gate.check_and_reserve(user_id)
        if not decision.allowed:
            raise QuotaExceededError(decision.limit)

        try:
            text = await self.pipeline.build_document(topic, doc_type, tone, sections_count)
        except Exception:
            logger.exception("generate.failed user=%s topic=%s", user_id, topic)
            raise

        new_used_count = await self.gate.commit(user_id, decision.profile)
        logger.info(
            "generate.done user=%s topic=%s chars=%d used=%d is_pro=%s",
            user_id,
            topic,
            len(text),
            new_used_count,
            decision.profile.is_pro,
        )
        return {"text": text, "new_used_count": new_used_count}

    async def usage(self, user_id: str) -> dict:
        decision = await self.gate.usage(user_id)
        return decision.as_usage()
