"""
Step engine and pipeline runner.

Evaluates an ordered pipeline of step records for a single input color.
Every handler has the shape::

    handler(color, state, step, strength) -> (color, state)

and returns the input color and state untouched when the pixel does not
qualify for the step. State is an immutable ``PipelineState``; handlers
build a new one with ``dataclasses.replace``.

Strength interpolation happens inside each handler because each parameter
declares its own neutral value:

- multiplicative / gamma parameters: ``1.0 + (target - 1.0) * strength``
- additive parameters: ``target * strength``
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Sequence, Tuple, Type

from lut_engine.color_space import RGB, clamp, hsl_to_rgb, rgb_to_hsl, wrap_hue
from lut_engine.errors import ConfigurationError
from lut_engine.steps import (
    BlackCrushStep,
    ExposureStep,
    GlobalHighlightDesatStep,
    HighlightProtectStep,
    HueDesatStep,
    RgbRebalanceStep,
    ShadowSatBoostStep,
    SkinCorrectionStep,
    SkinHighlightStep,
    SkinRolloffStep,
    StepBase,
)
from lut_engine.targeting import hue_window_strength, linear_window_strength, soft_knee_rolloff

logger = logging.getLogger(__name__)

# skin_correction skips pixels whose combined effect is below this
SKIN_CORRECTION_MIN_EFFECT = 0.01

# skin_highlight takes the skin branch only above this skin effect
SKIN_HIGHLIGHT_MIN_EFFECT = 0.1


@dataclass(frozen=True)
class PipelineState:
    """HSL state threaded through one pixel's pipeline.

    Attributes:
        h: Current hue in degrees
        s: Current saturation
        l: Current luminance
        orig_l: Luminance at pipeline entry, or after the last rgb_rebalance.
            Window tests that select pixels by brightness read this, so an
            earlier exposure change never moves a pixel in or out of them.
    """
    h: float
    s: float
    l: float
    orig_l: float

    @classmethod
    def from_rgb(cls, color: RGB) -> "PipelineState":
        h, s, l = rgb_to_hsl(*color)
        return cls(h=h, s=s, l=l, orig_l=l)

    def to_rgb(self) -> RGB:
        return hsl_to_rgb(self.h, self.s, self.l)


StepResult = Tuple[RGB, PipelineState]
Handler = Callable[[RGB, PipelineState, StepBase, float], StepResult]


def scale_multiplicative(target: float, strength: float) -> float:
    """Interpolate a gain/gamma-like parameter from neutral 1.0 toward target."""
    return 1.0 + (target - 1.0) * strength


def scale_additive(target: float, strength: float) -> float:
    """Interpolate an additive parameter from neutral 0.0 toward target."""
    return target * strength


def luminance_pow(base: float, exponent: float) -> float:
    """
    Raise a luminance to a (possibly extrapolated) gamma.

    Negative bases count as 0.0, since fractional powers of negatives are
    complex in Python. Zero to a negative power and results too large for a
    float both map to 1.0, the clamped value of a blown-out luminance.
    """
    base = max(base, 0.0)
    if base == 0.0 and exponent < 0.0:
        return 1.0
    try:
        return base ** exponent
    except OverflowError:
        return 1.0


def _emit(state: PipelineState) -> StepResult:
    return state.to_rgb(), state


# =============================================================================
# Luminance curves
# =============================================================================

def apply_rgb_rebalance(color: RGB, state: PipelineState, step: RgbRebalanceStep, strength: float) -> StepResult:
    """Per-channel gains, faded out for dark pixels. Resets orig_l."""
    r, g, b = color
    # Dark pixels get proportionally less gain to avoid wild hue swings
    ramp = clamp(max(r, g, b) / step.gain_ramp)

    gains = []
    for target in (step.r_gain, step.g_gain, step.b_gain):
        gain = scale_multiplicative(target, strength)
        gains.append(1.0 + (gain - 1.0) * ramp)

    new_color = (r * gains[0], g * gains[1], b * gains[2])
    # Physical brightness changed, so the original luminance moves with it
    return new_color, PipelineState.from_rgb(new_color)


def apply_exposure(color: RGB, state: PipelineState, step: ExposureStep, strength: float) -> StepResult:
    gamma = scale_multiplicative(step.gamma, strength)
    lift = scale_additive(step.shadow_lift, strength)

    lifted = state.l + lift * (1.0 - state.l)
    new_l = luminance_pow(lifted, gamma)
    return _emit(replace(state, l=new_l))


def apply_highlight_protect(color: RGB, state: PipelineState, step: HighlightProtectStep, strength: float) -> StepResult:
    """Fixed soft-knee clamp; not scaled by strength."""
    if state.l <= step.knee_start:
        return color, state
    new_l = soft_knee_rolloff(state.l, step.knee_start, step.knee_ceiling)
    return _emit(replace(state, l=new_l))


def apply_black_crush(color: RGB, state: PipelineState, step: BlackCrushStep, strength: float) -> StepResult:
    l = state.l
    if l >= step.transition_end:
        return color, state

    crush_gamma = scale_multiplicative(step.crush_gamma, strength)
    crushed = luminance_pow(l, crush_gamma)

    if l < step.black_threshold:
        new_l = crushed
    else:
        t = (l - step.black_threshold) / (step.transition_end - step.black_threshold)
        t = t * t * (3.0 - 2.0 * t)
        new_l = crushed + (l - crushed) * t

    return _emit(replace(state, l=new_l))


# =============================================================================
# Hue / saturation targeting
# =============================================================================

def apply_hue_desat(color: RGB, state: PipelineState, step: HueDesatStep, strength: float) -> StepResult:
    if state.s <= step.min_sat:
        return color, state

    hue_str = hue_window_strength(state.h, step.hue_center, step.hue_width, step.softness)
    if hue_str <= 0.0:
        return color, state

    weight = hue_str
    if step.sat_scaling_ref is not None:
        # Weakly saturated pixels get a proportionally weaker correction
        weight *= min(state.s / step.sat_scaling_ref, 1.0)

    sat_reduce = scale_multiplicative(step.sat_reduce, strength)
    hue_shift = scale_additive(step.hue_shift, strength)

    new_s = state.s * (1.0 - weight * (1.0 - sat_reduce))
    new_h = wrap_hue(state.h + hue_shift * weight)
    return _emit(replace(state, h=new_h, s=new_s))


def adaptive_sat_ratio(step: SkinCorrectionStep, s: float) -> float:
    """
    Saturation ratio for skin_correction, optionally lowered for heavily
    saturated skin.

    The adaptive ratio is clamped to [0, 1] so extreme parameters can never
    invert or boost saturation.
    """
    if not step.adaptive_desat or s <= step.desat_ref:
        return step.sat_reduce
    excess = (s - step.desat_ref) / (step.sat_high - step.desat_ref)
    return clamp(step.sat_reduce * (1.0 - step.desat_slope * excess))


def apply_skin_correction(color: RGB, state: PipelineState, step: SkinCorrectionStep, strength: float) -> StepResult:
    hue_str = hue_window_strength(state.h, step.hue_center, step.hue_width, step.hue_soft)
    if hue_str <= 0.0:
        return color, state

    lum_str = linear_window_strength(state.orig_l, step.lum_low, step.lum_high, step.lum_soft)
    sat_str = linear_window_strength(state.s, step.sat_low, step.sat_high, step.sat_soft)

    # Strength folds into the effect: the shift is additive and the
    # saturation ratio multiplicative, so both land on neutral at 0.0
    effect = hue_str * lum_str * sat_str * strength
    if effect <= SKIN_CORRECTION_MIN_EFFECT:
        return color, state

    ratio = adaptive_sat_ratio(step, state.s)
    new_h = wrap_hue(state.h + step.hue_shift * effect)
    new_s = state.s * (1.0 - effect * (1.0 - ratio))
    return _emit(replace(state, h=new_h, s=new_s))


def apply_shadow_sat_boost(color: RGB, state: PipelineState, step: ShadowSatBoostStep, strength: float) -> StepResult:
    ol = state.orig_l
    if not step.range_low < ol < step.range_high:
        return color, state

    # Strongest at the bottom of the range
    ramp = min((step.range_high - ol) / (step.range_high - step.range_low), 1.0)
    boost = scale_additive(step.boost, strength)
    new_s = min(state.s * (1.0 + boost * ramp), 1.0)
    return _emit(replace(state, s=new_s))


# =============================================================================
# Highlight handling
# =============================================================================

def apply_skin_highlight(color: RGB, state: PipelineState, step: SkinHighlightStep, strength: float) -> StepResult:
    l = state.l
    skin_str = hue_window_strength(state.h, step.skin_hue_center, step.skin_hue_width, step.skin_softness)
    skin_effect = skin_str * min(state.s / step.min_sat_ratio, 1.0) * strength

    if l > step.knee_start and skin_effect > SKIN_HIGHLIGHT_MIN_EFFECT:
        rolled = soft_knee_rolloff(l, step.knee_start, step.knee_ceiling)
        new_l = l + (rolled - l) * skin_effect

        hot = min((l - step.knee_start) / (1.0 - step.knee_start), 1.0)
        desat = 1.0 - (1.0 - step.hot_desat) * hot * skin_effect
        return _emit(replace(state, s=state.s * desat, l=new_l))

    if l > step.global_knee:
        rolled = soft_knee_rolloff(l, step.global_knee, step.global_ceiling)
        new_l = l + (rolled - l) * strength * (1.0 - skin_effect)
        return _emit(replace(state, l=new_l))

    return color, state


def apply_skin_rolloff(color: RGB, state: PipelineState, step: SkinRolloffStep, strength: float) -> StepResult:
    if state.s <= step.min_sat or state.l <= step.knee_start:
        return color, state

    skin_str = hue_window_strength(state.h, step.skin_hue_center, step.skin_hue_width, step.skin_softness)
    if skin_str <= 0.0:
        return color, state

    rolled = soft_knee_rolloff(state.l, step.knee_start, step.knee_ceiling)
    weight = skin_str * min(state.s / step.sat_ramp, 1.0) * strength
    new_l = state.l + (rolled - state.l) * weight
    return _emit(replace(state, l=new_l))


def apply_global_highlight_desat(
    color: RGB, state: PipelineState, step: GlobalHighlightDesatStep, strength: float
) -> StepResult:
    if state.l <= step.threshold:
        return color, state

    hot = min((state.l - step.threshold) / (1.0 - step.threshold), 1.0)
    amount = scale_additive(step.desat_amount, strength)
    return _emit(replace(state, s=state.s * (1.0 - hot * amount)))


# =============================================================================
# Pipeline runner
# =============================================================================

STEP_HANDLERS: Dict[Type[StepBase], Handler] = {
    RgbRebalanceStep: apply_rgb_rebalance,
    ExposureStep: apply_exposure,
    HighlightProtectStep: apply_highlight_protect,
    BlackCrushStep: apply_black_crush,
    HueDesatStep: apply_hue_desat,
    SkinCorrectionStep: apply_skin_correction,
    ShadowSatBoostStep: apply_shadow_sat_boost,
    SkinHighlightStep: apply_skin_highlight,
    SkinRolloffStep: apply_skin_rolloff,
    GlobalHighlightDesatStep: apply_global_highlight_desat,
}


def handler_for(step: StepBase) -> Handler:
    """Look up the handler for a step record.

    Raises:
        ConfigurationError: If the object is not a known step record
    """
    try:
        return STEP_HANDLERS[type(step)]
    except KeyError:
        raise ConfigurationError(f"unknown step type: {step!r}") from None


def apply_pipeline(color: RGB, pipeline: Sequence[StepBase], strength: float = 1.0) -> RGB:
    """
    Run one input color through every step in order.

    Args:
        color: Input (r, g, b)
        pipeline: Parsed step records (see ``lut_engine.steps.parse_pipeline``)
        strength: Global strength; 0.0 is neutral, 1.0 the configured target.
            Values outside [0, 1] extrapolate.

    Returns:
        Output (r, g, b), unclamped

    Raises:
        ConfigurationError: Empty pipeline or unknown step record
    """
    if not pipeline:
        raise ConfigurationError("pipeline is empty")

    color = (float(color[0]), float(color[1]), float(color[2]))
    state = PipelineState.from_rgb(color)
    for step in pipeline:
        color, state = handler_for(step)(color, state, step, strength)
    return color
