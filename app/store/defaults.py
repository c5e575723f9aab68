"""
Default Audit State — A blank worksheet.
"""

from __future__ import annotations

import time
import uuid

from app.models.audit_models import (
    AUDIT_COMPONENTS,
    AuditMetadata,
    AuditMode,
    AuditState,
    BiasSource,
    BiasType,
    C1Data,
    C2Data,
    C3Data,
    C4Data,
    ComponentStatus,
    DataRepresentation,
    DecisionStep,
    DecisionStepInputType,
)

DATA_SOURCE_CHECKLIST_KEYS = ("missingGroups", "temporalGaps", "labelBias", "proxyVars", "coverageGaps")

_RADIO = DecisionStepInputType.RADIO

DECISION_FRAMEWORK_STEPS: list[tuple[str, DecisionStepInputType, list[str]]] = [
    ("How reliable are outcome labels?", _RADIO, ["High", "Medium", "Low"]),
    ("Which errors cause more harm?", _RADIO, ["False Positives", "False Negatives", "Both equally"]),
    ("Do base rates differ across groups?", _RADIO, ["Yes", "No", "Unknown"]),
    ("Is score calibration critical?", _RADIO, ["Yes", "No", "N/A"]),
    ("What legal requirements apply?", DecisionStepInputType.CHECKLIST, []),
    ("Which intersections require evaluation?", DecisionStepInputType.MULTISELECT, []),
    ("Are there feedback loops?", _RADIO, ["Yes — High", "Yes — Medium", "Yes — Low", "No"]),
]


def now_ms() -> int:
    return int(time.time() * 1000)


def create_empty_c1() -> C1Data:
    return C1Data(
        data_representation=DataRepresentation(
            data_source_checklist={key: False for key in DATA_SOURCE_CHECKLIST_KEYS}
        )
    )


def create_empty_c2() -> C2Data:
    steps = [
        DecisionStep(
            step=i,
            question=question,
            input_type=input_type,
            options=list(options),
            answer="" if input_type == _RADIO else [],
        )
        for i, (question, input_type, options) in enumerate(DECISION_FRAMEWORK_STEPS, start=1)
    ]
    return C2Data(decision_framework=steps)


def create_empty_c3() -> C3Data:
    """All seven bias types, every dimension at 1, score 1.0, priority Low."""
    return C3Data(bias_sources=[BiasSource(type=bias_type) for bias_type in BiasType])


def create_empty_c4() -> C4Data:
    return C4Data()


def create_default_state(mode: AuditMode = AuditMode.LEARN) -> AuditState:
    timestamp = now_ms()
    return AuditState(
        metadata=AuditMetadata(
            id=str(uuid.uuid4()),
            name="New Audit",
            created_at=timestamp,
            updated_at=timestamp,
            version=1,
        ),
        mode=mode,
        component_status={c: ComponentStatus.NOT_STARTED for c in AUDIT_COMPONENTS},
        c1=create_empty_c1(),
        c2=create_empty_c2(),
        c3=create_empty_c3(),
        c4=create_empty_c4(),
    )
