import logging
from typing import Optional
from typing_extensions import TypedDict

from langgraph.graph import StateGraph, END

from texttoslides.llm_client import ContentPlanner, create_planner
from texttoslides.renderer import build_presentation
from texttoslides.schemas import ContentAnalysis, ProviderConfig, SlideStructure, TemplateAnalysis
from texttoslides.template_profiler import analyze_template

logger = logging.getLogger(__name__)


# --- State ---
class GenerationState(TypedDict, total=False):
    planner: ContentPlanner
    text: str
    guidance: str
    template_bytes: bytes

    content_analysis: Optional[ContentAnalysis]
    slide_structure: Optional[SlideStructure]
    template_analysis: Optional[TemplateAnalysis]
    presentation: Optional[bytes]


# --- Nodes ---

def analyze_text_node(state: GenerationState) -> GenerationState:
    analysis = state["planner"].analyze_text(state["text"], state.get("guidance", ""))
    logger.info(f"Text analysis found {len(analysis.themes)} themes")
    return {"content_analysis": analysis}


def generate_structure_node(state: GenerationState) -> GenerationState:
    structure = state["planner"].generate_slide_structure(state["content_analysis"], state.get("guidance", ""))
    logger.info(f"Slide structure has {len(structure.slides)} slides")
    return {"slide_structure": structure}


def analyze_template_node(state: GenerationState) -> GenerationState:
    return {"template_analysis": analyze_template(state["template_bytes"])}


def build_node(state: GenerationState) -> GenerationState:
    data = build_presentation(state["slide_structure"], state["template_bytes"], state["template_analysis"])
    return {"presentation": data}


# --- Graph Compilation ---
workflow = StateGraph(GenerationState)

workflow.add_node("analyze_text_node", analyze_text_node)
workflow.add_node("generate_structure_node", generate_structure_node)
workflow.add_node("analyze_template_node", analyze_template_node)
workflow.add_node("build_node", build_node)

workflow.set_entry_point("analyze_text_node")
workflow.add_edge("analyze_text_node", "generate_structure_node")
workflow.add_edge("generate_structure_node", "analyze_template_node")
workflow.add_edge("analyze_template_node", "build_node")
workflow.add_edge("build_node", END)

app = workflow.compile()


def generate_presentation(text: str, guidance: str, config: ProviderConfig, template_bytes: bytes,
                          planner: Optional[ContentPlanner] = None) -> bytes:
    """Runs text analysis, slide planning, template analysis and building in order.

    Any failure ends the request; there is no retry and no partial result.
    """
    planner = planner or create_planner(config)
    final_state = app.invoke({
        "planner": planner,
        "text": text,
        "guidance": guidance or "",
        "template_bytes": template_bytes,
    })
    return final_state["presentation"]


def analyze_template_request(template_bytes: bytes) -> TemplateAnalysis:
    return analyze_template(template_bytes)
