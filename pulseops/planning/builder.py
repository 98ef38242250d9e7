"""Graph builder: constructs the LangGraph planning topology.

Topology:

    START → assemble_prompt → draft_plan → parse_plan → check_plan
                                  ▲                         ├── "end"   → END
                                  └─────────────────────────┴── "retry"
"""

from __future__ import annotations

from langgraph.graph import END, START, StateGraph

from pulseops.planning.nodes import (
    LLMFactory,
    assemble_prompt,
    check_plan,
    make_draft_plan,
    parse_plan,
)
from pulseops.planning.state import PlanningState


def build_planning_graph(llm_factory: LLMFactory):
    """Construct and compile the planning graph.

    Args:
        llm_factory: Callable returning a langchain BaseChatModel.

    Returns:
        A compiled LangGraph application.
    """
    graph = StateGraph(PlanningState)

    graph.add_node("assemble_prompt", assemble_prompt)
    graph.add_node("draft_plan", make_draft_plan(llm_factory))
    graph.add_node("parse_plan", parse_plan)

    graph.add_edge(START, "assemble_prompt")
    graph.add_edge("assemble_prompt", "draft_plan")
    graph.add_edge("draft_plan", "parse_plan")

    graph.add_conditional_edges(
        "parse_plan",
        check_plan,
        {
            "end": END,
            "retry": "draft_plan",
        },
    )

    return graph.compile()
