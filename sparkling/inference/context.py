"""Inference context construction and prompt rendering."""

from typing import Dict, List

from sparkling.config.inference import CONTEXT_ENTRIES_PER_KIND
from sparkling.inference.types import InferenceContext
from sparkling.memory import MemoryEventType, MemoryStore
from sparkling.parameters import PARAMETER_SPECS, DecisionParameters

CONTEXT_KINDS = (
    MemoryEventType.RESOURCE_FOUND,
    MemoryEventType.RESOURCE_DEPLETED,
    MemoryEventType.ENERGY_FOUND,
    MemoryEventType.ENERGY_DEPLETED,
    MemoryEventType.SPARKLING_ENCOUNTER,
    MemoryEventType.TERRAIN_DISCOVERED,
)

_SECTION_TITLES = {
    MemoryEventType.RESOURCE_FOUND: "Food found",
    MemoryEventType.RESOURCE_DEPLETED: "Food depleted",
    MemoryEventType.ENERGY_FOUND: "Neural energy found",
    MemoryEventType.ENERGY_DEPLETED: "Neural energy depleted",
    MemoryEventType.SPARKLING_ENCOUNTER: "Encounters",
    MemoryEventType.TERRAIN_DISCOVERED: "Terrain",
}


def build_context(
    sparkling_id: int,
    state: str,
    food: float,
    max_food: float,
    neural_energy: float,
    max_neural_energy: float,
    memory: MemoryStore,
    parameters: DecisionParameters,
    entries_per_kind: int = CONTEXT_ENTRIES_PER_KIND,
) -> InferenceContext:
    """Snapshot a sparkling's situation for a strategy."""
    memories: Dict[str, List[Dict[str, object]]] = {
        kind.value: [entry.to_dict() for entry in memory.most_recent(kind, entries_per_kind)]
        for kind in CONTEXT_KINDS
    }
    latest = memory.latest_inference()
    context = InferenceContext(
        sparkling_id=sparkling_id,
        state=state,
        food=food,
        max_food=max_food,
        neural_energy=neural_energy,
        max_neural_energy=max_neural_energy,
        memories=memories,
        latest_inference=latest.to_dict() if latest is not None else None,
        parameters=parameters.to_dict(),
    )
    context.prompt = render_prompt(context)
    return context


def _format_entry(entry: Dict[str, object]) -> str:
    position = entry["position"]
    line = f"- at ({position['x']:.0f}, {position['y']:.0f}), t={entry['timestamp']:.1f}"  # type: ignore[index]
    if "amount" in entry:
        line += f", amount={entry['amount']:.1f}"
    if "terrain" in entry:
        line += f", terrain={entry['terrain']}"
    if "peer_id" in entry:
        line += f", sparkling={entry['peer_id']}, outcome={entry['outcome']}"
    return line


def render_prompt(context: InferenceContext) -> str:
    """Render the context as the user message of a text-generation request."""
    lines = [
        f"You are Sparkling {context.sparkling_id} in a foraging simulation. "
        "Adjust your decision parameters to improve survival.",
        "",
        "Current state:",
        f"- State: {context.state}",
        f"- Food: {context.food:.1f}/{context.max_food:.0f} ({context.food_ratio:.0%})",
        f"- Neural energy: {context.neural_energy:.1f}/{context.max_neural_energy:.0f} "
        f"({context.energy_ratio:.0%})",
        "",
        "Memory:",
    ]
    for kind in CONTEXT_KINDS:
        entries = context.memories.get(kind.value, [])
        lines.append(f"{_SECTION_TITLES[kind]}:")
        if entries:
            lines.extend(_format_entry(entry) for entry in entries)
        else:
            lines.append("- none")

    lines.append("")
    if context.latest_inference:
        latest = context.latest_inference
        outcome = "succeeded" if latest.get("success") else "failed"
        lines.append(f"Previous inference ({outcome}): {latest.get('reasoning', '')}")
        lines.append(f"Previous changes: {latest.get('parameter_changes', '')}")
    else:
        lines.append("Previous inference: none")

    lines.append("")
    lines.append("Decision parameters (name: value [min, max] description):")
    for spec in PARAMETER_SPECS:
        value = context.parameters.get(spec.name, spec.default)
        lines.append(
            f"- {spec.name}: {value:.2f} [{spec.min_val:g}, {spec.max_val:g}] {spec.description}"
        )

    lines.append("")
    lines.append(
        'Respond only with JSON: {"reasoning": "<why>", "parameters": {"<name>": <number>, ...}}. '
        "Include only the parameters you want to change."
    )
    return "\n".join(lines)
