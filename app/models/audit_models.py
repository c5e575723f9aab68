"""
Audit Data Models — The worksheet state for all four audit components.

Attributes are snake_case; every model also accepts and emits the camelCase
keys used by the browser worksheet's JSON export, so imported files
round-trip without a translation layer.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuditModel(BaseModel):
    """Base for all audit models: camelCase aliases, populate by field name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AuditMode(str, Enum):
    LEARN = "learn"
    AUDIT = "audit"


class ComponentStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


class RiskClassification(str, Enum):
    CRITICAL = "Critical"
    ELEVATED = "Elevated"
    MODERATE = "Moderate"
    LOW = "Low"


class ImpactLevel(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    LOW = "Low"


class BiasPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class BiasType(str, Enum):
    """The seven bias categories, in worksheet order."""

    HISTORICAL = "Historical"
    REPRESENTATION = "Representation"
    MEASUREMENT = "Measurement"
    AGGREGATION = "Aggregation"
    LEARNING = "Learning"
    EVALUATION = "Evaluation"
    DEPLOYMENT = "Deployment"


class DecisionStepInputType(str, Enum):
    RADIO = "radio"
    CHECKLIST = "checklist"
    MULTISELECT = "multiselect"


FAIRNESS_DEFINITION_NAMES: tuple[str, ...] = (
    "Demographic Parity",
    "Equal Opportunity",
    "Equalised Odds",
    "Predictive Parity",
    "Calibration",
    "Individual Fairness",
    "Counterfactual Fairness",
)

AUDIT_COMPONENTS: tuple[str, ...] = ("c1", "c2", "c3", "c4")


# ===== Component 1: Historical Context =====


class TimelineEvent(AuditModel):
    year: str
    event: str
    type: str = Field(default="policy", description="cultural | policy | system | legal")


class RiskMatrixEntry(AuditModel):
    """A scored, classified risk. score and classification are always derived together."""

    id: str
    risk: str = ""
    severity: float = 1
    likelihood: float = 1
    relevance: float = 1
    score: float = 1
    classification: RiskClassification = RiskClassification.LOW


class ProtectedGroup(AuditModel):
    group: str
    pattern: str = ""
    data_pathway: str = ""
    impact: ImpactLevel = ImpactLevel.MODERATE


class Intersection(AuditModel):
    groups: str
    priority: int = 1
    pattern: str = ""


class FeedbackLoop(AuditModel):
    id: str = ""
    trigger: str = ""
    mechanism: str = ""
    amplification: str = ""
    monitoring: str = ""


class DomainContext(AuditModel):
    system: str = ""
    decision_type: str = ""
    affected_population: str = ""
    historical_patterns: str = ""


class DataRepresentation(AuditModel):
    data_sources: str = ""
    coverage_gaps: str = ""
    label_reliability: str = ""
    data_source_checklist: dict[str, bool] = Field(default_factory=dict)


class TechnologyTransition(AuditModel):
    prior_process: str = ""
    what_changed: str = ""
    oversight_lost: str = ""


class C1Data(AuditModel):
    domain_context: DomainContext = Field(default_factory=DomainContext)
    data_representation: DataRepresentation = Field(default_factory=DataRepresentation)
    technology_transition: TechnologyTransition = Field(default_factory=TechnologyTransition)
    protected_groups: list[ProtectedGroup] = Field(default_factory=list)
    intersections: list[Intersection] = Field(default_factory=list)
    feedback_loops: list[FeedbackLoop] = Field(default_factory=list)
    risk_matrix: list[RiskMatrixEntry] = Field(default_factory=list)
    timeline: list[TimelineEvent] = Field(default_factory=list)


# ===== Component 2: Fairness Definitions =====


class DecisionStep(AuditModel):
    """
    One step of the definition-selection framework.

    answer is a string for radio steps and a list for checklist/multiselect
    steps; "" and [] both mean the step is unanswered.
    """

    step: int
    question: str
    input_type: DecisionStepInputType = DecisionStepInputType.RADIO
    options: list[str] = Field(default_factory=list)
    answer: str | list[str] = ""
    explanation: str = ""

    @property
    def is_answered(self) -> bool:
        return len(self.answer) > 0

    def answer_text(self) -> str:
        if isinstance(self.answer, list):
            return ", ".join(self.answer)
        return self.answer


class DefinitionSelection(AuditModel):
    definition: str = ""
    justification: str = ""


class TradeoffDoc(AuditModel):
    title: str = ""
    description: str = ""
    resolution: str = ""


class C2Data(AuditModel):
    decision_framework: list[DecisionStep] = Field(default_factory=list)
    primary_selection: DefinitionSelection = Field(default_factory=DefinitionSelection)
    secondary_selection: DefinitionSelection = Field(default_factory=DefinitionSelection)
    tradeoff: TradeoffDoc = Field(default_factory=TradeoffDoc)


# ===== Component 3: Bias Sources =====


class BiasDimensions(AuditModel):
    severity: float = 1
    scope: float = 1
    persistence: float = 1
    historical_alignment: float = 1
    feasibility: float = 1


class BiasSource(AuditModel):
    """A bias category rated on five dimensions; weighted_score and priority are derived."""

    type: BiasType
    description: str = ""
    indicators: list[str] = Field(default_factory=list)
    indicator_checks: list[bool] = Field(default_factory=list)
    evidence: str = ""
    severity_score: float = 1
    dimensions: BiasDimensions = Field(default_factory=BiasDimensions)
    weighted_score: float = 1.0
    priority: BiasPriority = BiasPriority.LOW
    accountable_party: str | None = None

    @property
    def is_scored(self) -> bool:
        """Rated on at least one dimension and above the 1.0 default."""
        return self.dimensions != BiasDimensions() and self.weighted_score > 1


class C3Data(AuditModel):
    bias_sources: list[BiasSource] = Field(default_factory=list)


# ===== Component 4: Fairness Metrics =====


class GroupRate(AuditModel):
    group: str
    rate: float
    spd: str = ""
    ci: tuple[float, float] = (0.0, 0.0)
    color: str = ""


class SPDComparison(AuditModel):
    comparison: str
    spd: float
    ci: tuple[float, float] = (0.0, 0.0)
    significant: bool = False


class ErrorRateEntry(AuditModel):
    group: str
    rate: float
    label: str = ""


class ErrorRates(AuditModel):
    overall: float = 0
    by_group: list[ErrorRateEntry] = Field(default_factory=list)


class IntersectionalRow(AuditModel):
    subgroup: str
    rate: float
    spd: str = ""
    error_rate: float = 0
    status: str = "Ref"


class ThresholdPoint(AuditModel):
    tolerance: str
    false_positive_rate: float
    true_positive_rate: float
    label: str = ""


class StatisticalValidation(AuditModel):
    """Display strings only; nothing here is computed."""

    bootstrap: str = ""
    permutation: str = ""
    effect_size: str = ""
    bayesian: str = ""


class Recommendation(AuditModel):
    id: str
    horizon: str
    action: str
    impact: str
    effort: str | None = None
    timeline: str | None = None
    estimated_impact: str | None = None


class AuditDimension(AuditModel):
    dimension: str
    score: float
    max: float = 5
    tooltip: str = ""


class DebtNoticeRates(AuditModel):
    by_age: list[GroupRate] = Field(default_factory=list)
    by_indigenous: list[GroupRate] = Field(default_factory=list)
    by_region: list[GroupRate] = Field(default_factory=list)


class MetricSummary(AuditModel):
    highest_group_rate: str = ""
    lowest_group_rate: str = ""
    worst_spd: str = Field(default="", alias="worstSPD")
    overall_error_rate: str = ""


class C4Data(AuditModel):
    debt_notice_rates: DebtNoticeRates = Field(default_factory=DebtNoticeRates)
    spd: list[SPDComparison] = Field(default_factory=list)
    error_rates: ErrorRates = Field(default_factory=ErrorRates)
    intersectional: list[IntersectionalRow] = Field(default_factory=list)
    threshold_sensitivity: list[ThresholdPoint] = Field(default_factory=list)
    statistical_validation: StatisticalValidation = Field(default_factory=StatisticalValidation)
    recommendations: list[Recommendation] = Field(default_factory=list)
    audit_dimensions: list[AuditDimension] = Field(default_factory=list)
    group_outcome_rates: str = ""
    error_rate_analysis: str = ""
    intersectional_analysis: str = ""
    threshold_analysis: str = ""
    validation_bootstrap: str = ""
    validation_permutation: str = ""
    validation_effect_size: str = ""
    validation_bayesian: str = ""
    pre_deployment_recs: str = ""
    post_deployment_recs: str = ""
    audit_dimension_scores: str = ""
    metric_summary: MetricSummary = Field(default_factory=MetricSummary)


# ===== Overview, report and LLM records =====


class SystemDescription(AuditModel):
    name: str = ""
    operator: str = ""
    period: str = ""
    scale: str = ""
    algorithm: str = ""
    decision: str = ""
    outcome: str = ""


class LLMAnalysis(AuditModel):
    id: str
    component: str
    section: str
    timestamp: int
    provider: str
    prompt: str
    response: str


class ExecutiveSummary(AuditModel):
    overall_risk_level: RiskClassification = RiskClassification.LOW
    key_findings: list[str] = Field(default_factory=list)
    top_disparities: list[str] = Field(default_factory=list)
    primary_recommendation: str = ""
    deployment_readiness: str = Field(default="No-Go", description="Go | Conditional | No-Go")


class AuditLimitations(AuditModel):
    data_gaps: str = ""
    methodological_limitations: str = ""
    scope_exclusions: str = ""
    confidence_statement: str = ""


class AuditMetadata(AuditModel):
    id: str
    name: str = "New Audit"
    created_at: int
    updated_at: int
    version: int = 1
    auditor_name: str | None = None
    auditor_role: str | None = None
    auditor_organization: str | None = None
    signed_off_at: int | None = None
    signoff_statement: str | None = None


class AuditState(AuditModel):
    """Aggregate root of one audit. Owned by AuditStore; the core reads snapshots."""

    metadata: AuditMetadata
    mode: AuditMode = AuditMode.LEARN
    active_component: str = "overview"
    component_status: dict[str, ComponentStatus] = Field(default_factory=dict)
    system: SystemDescription = Field(default_factory=SystemDescription)
    c1: C1Data = Field(default_factory=C1Data)
    c2: C2Data = Field(default_factory=C2Data)
    c3: C3Data = Field(default_factory=C3Data)
    c4: C4Data = Field(default_factory=C4Data)
    executive_summary: ExecutiveSummary = Field(default_factory=ExecutiveSummary)
    limitations: AuditLimitations = Field(default_factory=AuditLimitations)
    llm_analyses: list[LLMAnalysis] = Field(default_factory=list)
