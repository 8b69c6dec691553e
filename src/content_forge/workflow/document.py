import asyncio
import logging
from typing import Protocol, TypedDict

from content_forge.config import Settings, get_settings
from content_forge.errors import PipelineError
from content_forge.workflow.outline import parse_sections

logger = logging.getLogger(__name__)
TITLE_LOG_LIMIT = 80


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class DocumentState(TypedDict):
    topic: str
    doc_type: str
    tone: str
    sections_count: int
    toc: str
    titles: list[str]
    sections: list[str]
    document: str


def toc_prompt(topic: str, doc_type: str, tone: str, sections_count: int) -> str:
    return (
        f'Generate a detailed Table of Contents (TOC) for a "{doc_type}" about: "{topic}". '
        f'The content should be written in a "{tone}" tone and MUST have exactly {sections_count} '
        "main sections/chapters. Provide the TOC as a Markdown list of titles."
    )


def section_prompt(topic: str, title: str, tone: str) -> str:
    return (
        f'Based on the overall topic: "{topic}", write a detailed chapter/section titled "{title}". '
        "The content MUST be high-quality, actionable, and formatted with Markdown. "
        f'Maintain a consistent "{tone}" tone.'
    )


def assemble_document(topic: str, doc_type: str, toc: str, titles: list[str], sections: list[str]) -> str:
    parts = [
        f"# {topic} - A Comprehensive {doc_type}\n\n---\n\n",
        f"## Table of Contents\n\n{toc}\n\n---\n\n",
    ]
    for title, body in zip(titles, sections, strict=True):
        parts.append(f"## {title}\n\n{body}\n\n")
    return "".join(parts)


class DocumentPipeline:
    """TOC-then-sections document build implemented with LangGraph nodes.

    Section calls run one after another unless `section_fanout` is enabled,
    in which case they are issued together and reassembled in TOC order.
    Any failed call aborts the build with a PipelineError.
    """

    def __init__(self, generator: TextGenerator, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.generator = generator
        self._graph = None

    async def build_document(self, topic: str, doc_type: str, tone: str, sections_count: int) -> str:
        app = self._get_graph()
        try:
            final_state = await app.ainvoke(
                {
                    "topic": topic,
                    "doc_type": doc_type,
                    "tone": tone,
                    "sections_count": sections_count,
                    "toc": "",
                    "titles": [],
                    "sections": [],
                    "document": "",
                },
                config={"recursion_limit": max(sections_count, 0) + 10},
            )
        except PipelineError as exc:
            logger.error(
                "pipeline.failed stage=%s type=%s detail=%s",
                exc.stage,
                exc.cause.__class__.__name__,
                str(exc),
            )
            raise
        return final_state["document"]

    def _get_graph(self):
        if self._graph is None:
            self._graph = self._build_graph()
        return self._graph

    def _build_graph(self):
        from langgraph.graph import END, START, StateGraph

        async def toc_node(state: DocumentState) -> dict:
            logger.info("pipeline.toc topic=%s sections=%d", state["topic"], state["sections_count"])
            prompt = toc_prompt(state["topic"], state["doc_type"], state["tone"], state["sections_count"])
            return {"toc": await self._call("toc", prompt)}

        async def outline_node(state: DocumentState) -> dict:
            titles = parse_sections(state["toc"], state["sections_count"])
            if len(titles) < state["sections_count"]:
                logger.warning("pipeline.outline_short requested=%d parsed=%d", state["sections_count"], len(titles))
            logger.info("pipeline.outline titles=%d", len(titles))
            return {"titles": titles}

        async def section_node(state: DocumentState) -> dict:
            index = len(state["sections"])
            title = state["titles"][index]
            body = await self._section(state, index, title)
            return {"sections": [*state["sections"], body]}

        async def fanout_node(state: DocumentState) -> dict:
            logger.info("pipeline.fanout sections=%d", len(state["titles"]))
            tasks = [
                asyncio.ensure_future(self._section(state, index, title))
                for index, title in enumerate(state["titles"])
            ]
            try:
                bodies = await asyncio.gather(*tasks)
            except BaseException:
                pending = [task for task in tasks if not task.done()]
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                logger.info("pipeline.fanout_cancelled pending=%d", len(pending))
                raise
            return {"sections": list(bodies)}

        async def assemble_node(state: DocumentState) -> dict:
            document = assemble_document(
                state["topic"], state["doc_type"], state["toc"], state["titles"], state["sections"]
            )
            logger.info("pipeline.assemble sections=%d chars=%d", len(state["sections"]), len(document))
            return {"document": document}

        def after_outline(state: DocumentState) -> str:
            if not state["titles"]:
                return "assemble_step"
            return "fanout_step" if self.settings.section_fanout else "section_step"

        def after_section(state: DocumentState) -> str:
            if len(state["sections"]) < len(state["titles"]):
                return "section_step"
            return "assemble_step"

        graph = StateGraph(DocumentState)
        graph.add_node("toc_step", toc_node)
        graph.add_node("outline_step", outline_node)
        graph.add_node("section_step", section_node)
        graph.add_node("fanout_step", fanout_node)
        graph.add_node("assemble_step", assemble_node)
        graph.add_edge(START, "toc_step")
        graph.add_edge("toc_step", "outline_step")
        graph.add_conditional_edges(
            "outline_step",
            after_outline,
            ["section_step", "fanout_step", "assemble_step"],
        )
        graph.add_conditional_edges("section_step", after_section, ["section_step", "assemble_step"])
        graph.add_edge("fanout_step", "assemble_step")
        graph.add_edge("assemble_step", END)
        return graph.compile()

    async def _section(self, state: DocumentState, index: int, title: str) -> str:
        logger.info(
            "pipeline.section index=%d/%d title=%s",
            index + 1,
            len(state["titles"]),
            title[:TITLE_LOG_LIMIT],
        )
        prompt = section_prompt(state["topic"], title, state["tone"])
        return await self._call(f"section {index + 1}", prompt)

    async def _call(self, stage: str, prompt: str) -> str:
        try:
            return await self.generator.generate(prompt)
        except Exception as exc:
            raise PipelineError(stage, exc) from exc
