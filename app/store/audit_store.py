"""
Audit Store — Owns the mutable worksheet state and applies update commands.

Every command replaces the affected sub-model with a validated copy, bumps
metadata.updated_at, and re-derives any computed fields it touched:

- risk ratings changed      → that entry's score + classification
- bias dimensions changed   → that source's weighted_score + priority
- primary definition changed → every bias source, under the new profile

Readers get deep-copied snapshots; nothing outside the store holds a
reference to the live state.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from app.core.bias_scorer import get_adaptive_weights, rescore_bias_sources, score_bias_source
from app.core.risk_scorer import RISK_TEMPLATES, create_risk_entry, rescore_risk_entry
from app.data.robodebt import load_learn_state
from app.models.audit_models import (
    AuditMode,
    AuditState,
    BiasSource,
    ComponentStatus,
    FeedbackLoop,
    Intersection,
    LLMAnalysis,
    ProtectedGroup,
    RiskMatrixEntry,
)
from app.store.defaults import create_default_state, now_ms

logger = logging.getLogger("fairaudit.store")

_DERIVED_BIAS_FIELDS = {"weighted_score", "priority"}
_DERIVED_RISK_FIELDS = {"score", "classification"}


class AuditStoreError(Exception):
    """Base error for rejected store commands."""


class ItemNotFoundError(AuditStoreError, LookupError):
    """A list command referenced an index that does not exist."""


class InvalidUpdateError(AuditStoreError, ValueError):
    """An update named an unknown field or carried a value of the wrong shape."""


def _merge(model: BaseModel, updates: dict[str, Any]) -> BaseModel:
    """Validated copy of `model` with `updates` applied. Keys may be field names or camelCase aliases."""
    fields = type(model).model_fields
    aliases = {f.alias: name for name, f in fields.items() if f.alias}
    updates = {aliases.get(key, key): value for key, value in updates.items()}
    unknown = sorted(set(updates) - set(fields))
    if unknown:
        raise InvalidUpdateError(f"Unknown field(s) for {type(model).__name__}: {', '.join(unknown)}")

    data = model.model_dump()
    for key, value in updates.items():
        if isinstance(value, BaseModel):
            value = value.model_dump()
        data[key] = value

    try:
        return type(model).model_validate(data)
    except ValidationError as e:
        raise InvalidUpdateError(str(e)) from e


def _check_index(items: list, index: int, kind: str) -> None:
    if not 0 <= index < len(items):
        raise ItemNotFoundError(f"No {kind} at index {index} (have {len(items)})")


class AuditStore:
    """Single-audit, in-process state holder."""

    def __init__(self, state: AuditState | None = None) -> None:
        self._state = state.model_copy(deep=True) if state else create_default_state()

    # ── Reads ──

    def snapshot(self) -> AuditState:
        """Deep copy of the worksheet (audit-mode) state."""
        return self._state.model_copy(deep=True)

    def view(self) -> AuditState:
        """State for the active mode: the Robodebt case study in learn mode, the worksheet otherwise."""
        if self._state.mode == AuditMode.LEARN:
            return load_learn_state().model_copy(deep=True)
        return self.snapshot()

    @property
    def mode(self) -> AuditMode:
        return self._state.mode

    # ── Internal ──

    def _touch(self) -> None:
        self._state.metadata = self._state.metadata.model_copy(update={"updated_at": now_ms()})

    def _active_weights(self):
        return get_adaptive_weights(self._state.c2.primary_selection.definition).weights

    # ── Mode & navigation ──

    def set_mode(self, mode: AuditMode | str) -> None:
        self._state.mode = AuditMode(mode)
        logger.info(f"Mode set to {self._state.mode.value}")

    def set_active_component(self, component: str) -> None:
        self._state.active_component = component

    def set_component_status(self, component: str, status: ComponentStatus | str) -> None:
        self._state.component_status = {**self._state.component_status, component: ComponentStatus(status)}

    # ── Overview ──

    def update_system(self, **updates: Any) -> None:
        self._state.system = _merge(self._state.system, updates)
        self._touch()

    # ── C1 ──

    def update_domain_context(self, **updates: Any) -> None:
        c1 = self._state.c1
        c1.domain_context = _merge(c1.domain_context, updates)
        self._touch()

    def update_data_representation(self, **updates: Any) -> None:
        c1 = self._state.c1
        c1.data_representation = _merge(c1.data_representation, updates)
        self._touch()

    def update_technology_transition(self, **updates: Any) -> None:
        c1 = self._state.c1
        c1.technology_transition = _merge(c1.technology_transition, updates)
        self._touch()

    def add_protected_group(self, group: ProtectedGroup) -> None:
        self._state.c1.protected_groups = [*self._state.c1.protected_groups, group]
        self._touch()

    def update_protected_group(self, index: int, **updates: Any) -> None:
        groups = list(self._state.c1.protected_groups)
        _check_index(groups, index, "protected group")
        groups[index] = _merge(groups[index], updates)
        self._state.c1.protected_groups = groups
        self._touch()

    def remove_protected_group(self, index: int) -> None:
        groups = list(self._state.c1.protected_groups)
        _check_index(groups, index, "protected group")
        del groups[index]
        self._state.c1.protected_groups = groups
        self._touch()

    def add_intersection(self, intersection: Intersection) -> None:
        self._state.c1.intersections = [*self._state.c1.intersections, intersection]
        self._touch()

    def update_intersection(self, index: int, **updates: Any) -> None:
        items = list(self._state.c1.intersections)
        _check_index(items, index, "intersection")
        items[index] = _merge(items[index], updates)
        self._state.c1.intersections = items
        self._touch()

    def remove_intersection(self, index: int) -> None:
        items = list(self._state.c1.intersections)
        _check_index(items, index, "intersection")
        del items[index]
        self._state.c1.intersections = items
        self._touch()

    def add_feedback_loop(self, loop: FeedbackLoop) -> None:
        self._state.c1.feedback_loops = [*self._state.c1.feedback_loops, loop]
        self._touch()

    def update_feedback_loop(self, index: int, **updates: Any) -> None:
        loops = list(self._state.c1.feedback_loops)
        _check_index(loops, index, "feedback loop")
        loops[index] = _merge(loops[index], updates)
        self._state.c1.feedback_loops = loops
        self._touch()

    def remove_feedback_loop(self, index: int) -> None:
        loops = list(self._state.c1.feedback_loops)
        _check_index(loops, index, "feedback loop")
        del loops[index]
        self._state.c1.feedback_loops = loops
        self._touch()

    # ── C1 risk matrix ──

    def _next_risk_id(self) -> str:
        numbers = [
            int(entry.id[1:])
            for entry in self._state.c1.risk_matrix
            if entry.id[:1] == "R" and entry.id[1:].isdigit()
        ]
        return f"R{max(numbers, default=0) + 1}"

    def add_risk(self, entry: RiskMatrixEntry) -> RiskMatrixEntry:
        """Append `entry` with its score and classification re-derived from the ratings."""
        entry = rescore_risk_entry(entry)
        self._state.c1.risk_matrix = [*self._state.c1.risk_matrix, entry]
        self._touch()
        return entry

    def add_new_risk(
        self,
        risk: str = "",
        severity: float = 1,
        likelihood: float = 1,
        relevance: float = 1,
    ) -> RiskMatrixEntry:
        """Append a risk with the next free R-number id."""
        return self.add_risk(create_risk_entry(self._next_risk_id(), risk, severity, likelihood, relevance))

    def add_risk_templates(self, template_indexes: list[int]) -> list[RiskMatrixEntry]:
        """Append the chosen stock risks, in template order."""
        added: list[RiskMatrixEntry] = []
        for index in sorted(set(template_indexes)):
            _check_index(RISK_TEMPLATES, index, "risk template")
            template = RISK_TEMPLATES[index]
            added.append(
                self.add_risk(
                    create_risk_entry(
                        self._next_risk_id(),
                        str(template["risk"]),
                        template["severity"],
                        template["likelihood"],
                        template["relevance"],
                    )
                )
            )
        return added

    def update_risk(self, index: int, **updates: Any) -> RiskMatrixEntry:
        """Edit a risk; score and classification are always recomputed, never taken from `updates`."""
        matrix = list(self._state.c1.risk_matrix)
        _check_index(matrix, index, "risk")
        editable = {k: v for k, v in updates.items() if k not in _DERIVED_RISK_FIELDS}
        matrix[index] = rescore_risk_entry(_merge(matrix[index], editable))
        self._state.c1.risk_matrix = matrix
        self._touch()
        return matrix[index]

    def remove_risk(self, index: int) -> None:
        matrix = list(self._state.c1.risk_matrix)
        _check_index(matrix, index, "risk")
        del matrix[index]
        self._state.c1.risk_matrix = matrix
        self._touch()

    def set_risk_matrix(self, matrix: list[RiskMatrixEntry]) -> None:
        self._state.c1.risk_matrix = [rescore_risk_entry(entry) for entry in matrix]
        self._touch()

    # ── C2 ──

    def update_decision_step(self, index: int, **updates: Any) -> None:
        steps = list(self._state.c2.decision_framework)
        _check_index(steps, index, "decision step")
        steps[index] = _merge(steps[index], updates)
        self._state.c2.decision_framework = steps
        self._touch()

    def update_primary_selection(self, **updates: Any) -> None:
        """Change the primary definition and re-derive every bias score under its weight profile."""
        c2 = self._state.c2
        previous = c2.primary_selection.definition
        c2.primary_selection = _merge(c2.primary_selection, updates)

        definition = c2.primary_selection.definition
        if definition != previous:
            self._state.c3.bias_sources = rescore_bias_sources(self._state.c3.bias_sources, definition)
            logger.info(
                f"Primary definition changed to {definition!r}; rescored "
                f"{len(self._state.c3.bias_sources)} bias sources"
            )
        self._touch()

    def update_secondary_selection(self, **updates: Any) -> None:
        c2 = self._state.c2
        c2.secondary_selection = _merge(c2.secondary_selection, updates)
        self._touch()

    def update_tradeoff(self, **updates: Any) -> None:
        c2 = self._state.c2
        c2.tradeoff = _merge(c2.tradeoff, updates)
        self._touch()

    # ── C3 ──

    def update_bias_source(self, index: int, **updates: Any) -> BiasSource:
        """Edit a bias source; weighted_score and priority are re-derived under the active profile."""
        sources = list(self._state.c3.bias_sources)
        _check_index(sources, index, "bias source")
        editable = {k: v for k, v in updates.items() if k not in _DERIVED_BIAS_FIELDS}
        if "type" in editable and editable["type"] != sources[index].type:
            raise InvalidUpdateError("Bias source type is fixed and cannot be changed")

        sources[index] = score_bias_source(_merge(sources[index], editable), self._active_weights())
        self._state.c3.bias_sources = sources
        self._touch()
        return sources[index]

    def update_bias_dimensions(self, index: int, **dimensions: float) -> BiasSource:
        sources = self._state.c3.bias_sources
        _check_index(sources, index, "bias source")
        merged = _merge(sources[index].dimensions, dimensions)
        return self.update_bias_source(index, dimensions=merged)

    # ── C4 ──

    def update_c4(self, **updates: Any) -> None:
        self._state.c4 = _merge(self._state.c4, updates)
        self._touch()

    def update_metric_summary(self, **updates: Any) -> None:
        c4 = self._state.c4
        c4.metric_summary = _merge(c4.metric_summary, updates)
        self._touch()

    def update_statistical_validation(self, **updates: Any) -> None:
        c4 = self._state.c4
        c4.statistical_validation = _merge(c4.statistical_validation, updates)
        self._touch()

    # ── LLM, report and metadata ──

    def add_llm_analysis(self, analysis: LLMAnalysis) -> None:
        self._state.llm_analyses = [*self._state.llm_analyses, analysis]
        self._touch()

    def update_executive_summary(self, **updates: Any) -> None:
        self._state.executive_summary = _merge(self._state.executive_summary, updates)
        self._touch()

    def update_limitations(self, **updates: Any) -> None:
        self._state.limitations = _merge(self._state.limitations, updates)
        self._touch()

    def update_audit_metadata(self, **updates: Any) -> None:
        self._state.metadata = _merge(self._state.metadata, updates)
        self._touch()

    # ── Whole-audit management ──

    def reset(self) -> None:
        self._state = create_default_state(mode=self._state.mode)
        logger.info(f"Audit reset (id={self._state.metadata.id})")

    def load(self, state: AuditState) -> None:
        """Replace the worksheet with `state`, re-deriving every computed field."""
        state = state.model_copy(deep=True)
        state.c1.risk_matrix = [rescore_risk_entry(entry) for entry in state.c1.risk_matrix]
        state.c3.bias_sources = rescore_bias_sources(
            state.c3.bias_sources, state.c2.primary_selection.definition
        )
        self._state = state
        logger.info(f"Audit loaded (id={state.metadata.id}, name={state.metadata.name!r})")
