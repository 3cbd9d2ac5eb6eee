"""
LangGraph nodes of the pricing pipeline.

Each public coroutine is one graph node. It delegates to run_stage()
with a stage body and the defaults that apply when the body fails.
"""

from pricing_skills.confidence_scoring import ConfidenceScorer, max_uncertainty_range
from pricing_skills.contingency import recommend_contingency
from pricing_skills.market_analysis import (
    InsufficientMarketDataError,
    MarketAnalysisEngine,
    MarketDataSourceError,
    estimate_win_probability,
)
from pricing_skills.profit_margin import MarginConfigurationError, RiskAdjustedProfitMarginCalculator
from pricing_skills.risk_assessment import RiskAssessmentEngine, build_fallback_assessment
from pricing_skills.size_based_overhead import SizeBasedOverheadCalculator

from proposal_pricing.core.config import Settings
from proposal_pricing.core.exceptions import StageExecutionError
from proposal_pricing.core.logging import PipelineLogger
from proposal_pricing.pipeline.stages import (
    CONFIDENCE_SCORING,
    CONTINGENCY_RECOMMENDATION,
    LEGACY_CALCULATION,
    MARKET_ANALYSIS,
    OVERHEAD_CALCULATION,
    PROFIT_MARGIN_CALCULATION,
    RISK_ASSESSMENT,
    RISK_VALIDATION,
    StageOutcome,
    run_stage,
)
from proposal_pricing.pipeline.validation import screen_risk_inputs

NEUTRAL_RISK_SCORE = 50.0


class PricingStages:
    """
    Graph nodes bound to the sub-engines they drive.

    Attributes:
        risk_engine: Scores risk factor inputs against the catalog.
        overhead_calculator: Size-based overhead tiers.
        margin_calculator: Risk-adjusted profit margin blending.
        market_engine: Market conditions, benchmark and packages.
        confidence_scorer: Confidence score and uncertainty band.
    """

    def __init__(
        self,
        risk_engine: RiskAssessmentEngine,
        overhead_calculator: SizeBasedOverheadCalculator,
        margin_calculator: RiskAdjustedProfitMarginCalculator,
        market_engine: MarketAnalysisEngine,
        confidence_scorer: ConfidenceScorer,
        settings: Settings,
        logger: PipelineLogger,
    ) -> None:
        self.risk_engine = risk_engine
        self.overhead_calculator = overhead_calculator
        self.margin_calculator = margin_calculator
        self.market_engine = market_engine
        self.confidence_scorer = confidence_scorer
        self.settings = settings
        self.logger = logger

    # ==================================================================
    # Shared amount helpers
    # ==================================================================

    def _fixed_overhead(self, state: dict) -> dict:
        request = state["request"]
        return {
            "overhead_result": None,
            "overhead_amount": request.base_cost * request.overhead_percentage / 100,
            "overhead_percentage": request.overhead_percentage,
        }

    def _legacy_risk_adjustment(self, cost_with_profit: float, risk_score: float | None) -> float:
        if risk_score is None:
            return 0.0
        return cost_with_profit * risk_score * self.settings.legacy_risk_rate_per_point

    def _price_with_margin(self, state: dict, margin: float) -> dict:
        request = state["request"]
        subtotal = request.base_cost + state["overhead_amount"]
        cost_with_profit = subtotal * (1 + margin / 100)
        risk_adjustment = 0.0
        if state["fallback_used"]:
            risk_adjustment = self._legacy_risk_adjustment(cost_with_profit, request.risk_score)
        return {
            "profit_margin": margin,
            "profit_amount": cost_with_profit - subtotal,
            "cost_with_profit": cost_with_profit,
            "risk_adjustment": risk_adjustment,
        }

    def _with_contingency(self, state: dict, rate: float) -> dict:
        amount = state["request"].base_cost * rate
        return {
            "contingency_rate": rate,
            "contingency_amount": amount,
            "total_cost": state["cost_with_profit"] + amount + state["risk_adjustment"],
        }

    @staticmethod
    def _risk_score(state: dict) -> float:
        risk = state.get("risk_result")
        return risk.total_risk_score if risk is not None else NEUTRAL_RISK_SCORE

    # ==================================================================
    # risk_validation
    # ==================================================================

    async def risk_validation(self, state: dict) -> dict:
        return await run_stage(RISK_VALIDATION, state, self._validate, lambda s: {"risk_inputs": {}}, self.logger)

    async def _validate(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=RISK_VALIDATION)
        request = state["request"]

        if state["mode"] == "legacy":
            outcome.warn("No risk factor inputs provided, using legacy risk scoring")
            return outcome

        screened = screen_risk_inputs(
            request.risk_factor_inputs,
            max_string_length=self.settings.max_input_string_length,
            unusual_threshold=self.settings.unusual_numeric_threshold,
        )
        for message in screened.warnings:
            outcome.warn(message)
        outcome.updates["risk_inputs"] = screened.accepted
        self.logger.debug(
            RISK_VALIDATION,
            f"{len(screened.accepted)}/{len(request.risk_factor_inputs)} risk inputs accepted",
        )
        return outcome

    # ==================================================================
    # risk_assessment
    # ==================================================================

    async def risk_assessment(self, state: dict) -> dict:
        return await run_stage(RISK_ASSESSMENT, state, self._assess_risk, self._fallback_risk, self.logger)

    def _fallback_risk(self, state: dict) -> dict:
        return {
            "risk_result": build_fallback_assessment(state["request"].risk_score),
            "fallback_used": True,
        }

    async def _assess_risk(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=RISK_ASSESSMENT)
        result = self.risk_engine.assess(state["risk_inputs"])

        if result is None:
            outcome.updates = self._fallback_risk(state)
            for message in outcome.updates["risk_result"].warnings:
                outcome.degrade(message)
            return outcome

        for message in result.warnings:
            outcome.warn(message)
        outcome.updates = {"risk_result": result, "fallback_used": False}
        self.logger.debug(
            RISK_ASSESSMENT,
            f"score={result.total_risk_score:.1f} level={result.risk_level.value} "
            f"factors={result.factors_processed}/{result.factors_available}",
        )
        return outcome

    # ==================================================================
    # overhead_calculation
    # ==================================================================

    async def overhead_calculation(self, state: dict) -> dict:
        return await run_stage(OVERHEAD_CALCULATION, state, self._calculate_overhead, self._fixed_overhead, self.logger)

    async def _calculate_overhead(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=OVERHEAD_CALCULATION)
        request = state["request"]

        if not request.use_size_based_overhead:
            outcome.updates = self._fixed_overhead(state)
            return outcome

        result = self.overhead_calculator.calculate(
            request.base_cost,
            use_smooth_scaling=request.use_smooth_scaling,
        )
        for message in result.warnings:
            outcome.warn(message)
        outcome.updates = {
            "overhead_result": result,
            "overhead_amount": result.overhead_amount,
            "overhead_percentage": result.overhead_percentage,
        }
        return outcome

    # ==================================================================
    # profit_margin_calculation
    # ==================================================================

    async def profit_margin_calculation(self, state: dict) -> dict:
        return await run_stage(
            PROFIT_MARGIN_CALCULATION,
            state,
            self._calculate_margin,
            lambda s: self._price_with_margin(s, s["request"].profit_margin),
            self.logger,
        )

    async def _calculate_margin(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=PROFIT_MARGIN_CALCULATION)
        risk = state["risk_result"]
        if risk is None:
            raise StageExecutionError("No risk assessment available", stage=PROFIT_MARGIN_CALCULATION)

        try:
            result = self.margin_calculator.calculate(risk, base_margin=state["request"].profit_margin)
        except MarginConfigurationError as e:
            raise StageExecutionError(
                "Invalid profit margin configuration",
                stage=PROFIT_MARGIN_CALCULATION,
                original_error=e,
            ) from e

        for message in result.warnings:
            outcome.warn(message)
        outcome.updates = {
            "margin_result": result,
            **self._price_with_margin(state, result.adjusted_profit_margin),
        }
        return outcome

    # ==================================================================
    # market_analysis
    # ==================================================================

    async def market_analysis(self, state: dict) -> dict:
        return await run_stage(MARKET_ANALYSIS, state, self._analyze_market, self._risk_only_market, self.logger)

    def _risk_only_market(self, state: dict) -> dict:
        estimate = estimate_win_probability(0.0, self._risk_score(state))
        return {
            "market_conditions": None,
            "market_benchmark": None,
            "package_recommendations": None,
            "win_probability": estimate.probability,
        }

    async def _analyze_market(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=MARKET_ANALYSIS)
        request = state["request"]

        conditions = None
        if request.region and request.material_type:
            conditions = self.market_engine.analyze_conditions(request.region, request.material_type)
            for note in conditions.notes:
                outcome.warn(note)
        else:
            outcome.degrade("Region and material type are required for market conditions; market adjustments skipped")

        cost_per_unit = state["cost_with_profit"]
        if request.square_footage:
            cost_per_unit = state["cost_with_profit"] / request.square_footage

        benchmark = None
        if request.region and request.square_footage:
            try:
                benchmark = await self.market_engine.benchmark(
                    cost_per_unit,
                    region=request.region,
                    project_type=request.project_type,
                )
            except MarketDataSourceError as e:
                outcome.degrade(f"Historical market data unavailable: {e.reason}")
            except InsufficientMarketDataError as e:
                outcome.warn(str(e))

        estimate = self.market_engine.estimate_win_probability(cost_per_unit, self._risk_score(state), benchmark)
        for message in estimate.warnings:
            outcome.warn(message)

        packages = None
        if benchmark is not None:
            config = self.margin_calculator.config
            packages = self.market_engine.recommend_packages(
                request.base_cost + state["overhead_amount"],
                benchmark,
                win_probability=estimate.probability,
                min_margin=config.min_margin,
                max_margin=config.max_margin,
                square_footage=request.square_footage,
            )
            for message in packages.warnings + packages.errors:
                outcome.warn(message)

        outcome.updates = {
            "market_conditions": conditions,
            "market_benchmark": benchmark,
            "package_recommendations": packages,
            "win_probability": estimate.probability,
        }
        return outcome

    # ==================================================================
    # contingency_recommendation
    # ==================================================================

    async def contingency_recommendation(self, state: dict) -> dict:
        return await run_stage(
            CONTINGENCY_RECOMMENDATION,
            state,
            self._recommend_contingency,
            self._baseline_contingency,
            self.logger,
        )

    def _baseline_contingency(self, state: dict) -> dict:
        risk = state.get("risk_result")
        rate = risk.contingency_rate if risk is not None else 0.0
        return {"contingency_result": None, **self._with_contingency(state, rate)}

    async def _recommend_contingency(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=CONTINGENCY_RECOMMENDATION)
        risk = state["risk_result"]
        if risk is None:
            raise StageExecutionError("No risk assessment available", stage=CONTINGENCY_RECOMMENDATION)

        recommendation = recommend_contingency(risk, state["market_conditions"])
        outcome.updates = {
            "contingency_result": recommendation,
            **self._with_contingency(state, recommendation.recommended_rate),
        }
        return outcome

    # ==================================================================
    # confidence_scoring
    # ==================================================================

    async def confidence_scoring(self, state: dict) -> dict:
        return await run_stage(
            CONFIDENCE_SCORING,
            state,
            self._score_confidence,
            lambda s: {"confidence_result": None, "uncertainty_range": max_uncertainty_range(s["total_cost"])},
            self.logger,
        )

    async def _score_confidence(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=CONFIDENCE_SCORING)
        result = self.confidence_scorer.score(
            state["request"].confidence_factors,
            final_price=state["total_cost"],
            risk_assessment=state["risk_result"],
        )
        for message in result.warnings:
            outcome.warn(message)
        outcome.updates = {
            "confidence_result": result,
            "uncertainty_range": result.uncertainty_range,
        }
        return outcome

    # ==================================================================
    # legacy_calculation
    # ==================================================================

    async def legacy_calculation(self, state: dict) -> dict:
        return await run_stage(LEGACY_CALCULATION, state, self._calculate_legacy, self._legacy_defaults, self.logger)

    def _legacy_defaults(self, state: dict) -> dict:
        base_cost = state["request"].base_cost
        return {
            "total_cost": base_cost,
            "win_probability": self.settings.default_win_probability,
            "uncertainty_range": max_uncertainty_range(base_cost),
        }

    async def _calculate_legacy(self, state: dict) -> StageOutcome:
        outcome = StageOutcome(stage=LEGACY_CALCULATION)
        request = state["request"]
        settings = self.settings

        overhead_amount = request.base_cost * request.overhead_percentage / 100
        subtotal = request.base_cost + overhead_amount
        cost_with_profit = subtotal * (1 + request.profit_margin / 100)
        risk_adjustment = self._legacy_risk_adjustment(cost_with_profit, request.risk_score)
        total_cost = cost_with_profit + risk_adjustment

        if request.risk_score is None:
            win_probability = settings.default_win_probability
        else:
            win_probability = max(
                settings.minimum_win_probability,
                100 - request.risk_score * settings.legacy_win_probability_per_point,
            )

        outcome.updates = {
            "overhead_amount": overhead_amount,
            "overhead_percentage": request.overhead_percentage,
            "profit_margin": request.profit_margin,
            "profit_amount": cost_with_profit - subtotal,
            "cost_with_profit": cost_with_profit,
            "risk_adjustment": risk_adjustment,
            "total_cost": total_cost,
            "win_probability": min(100.0, win_probability),
            "uncertainty_range": max_uncertainty_range(total_cost),
        }
        return outcome
