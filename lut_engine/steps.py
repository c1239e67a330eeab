"""
Pipeline step records.

Each step type is a frozen pydantic model discriminated by its ``step``
field, so an unknown step type, a missing parameter, or a misspelled one is
rejected when the pipeline is parsed rather than halfway through a LUT.

Parameter values are the targets at full strength (1.0). Handlers in
``lut_engine.engine`` interpolate them toward neutral for lower strengths.
"""

from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from lut_engine.errors import ConfigurationError


class StepBase(BaseModel):
    """Common configuration for all step records."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    summary: ClassVar[str] = ""


class RgbRebalanceStep(StepBase):
    summary: ClassVar[str] = (
        "Per-channel RGB gain adjustment, scaled by brightness to avoid wild hue swings in dark pixels."
    )

    step: Literal["rgb_rebalance"] = "rgb_rebalance"
    r_gain: float = Field(gt=0.0, description="Red channel multiplier (1.0 = neutral)")
    g_gain: float = Field(gt=0.0, description="Green channel multiplier (1.0 = neutral)")
    b_gain: float = Field(gt=0.0, description="Blue channel multiplier (1.0 = neutral)")
    gain_ramp: float = Field(gt=0.0, description="Brightest-channel level for full gain (below this, gains are reduced)")


class ExposureStep(StepBase):
    summary: ClassVar[str] = "Global exposure adjustment via gamma curve with optional shadow floor lift."

    step: Literal["exposure"] = "exposure"
    gamma: float = Field(gt=0.0, description="Gamma at full strength (>1.0 darkens, <1.0 brightens)")
    shadow_lift: float = Field(default=0.0, description="Shadow floor lift amount (0.0-0.05 typical)")


class HighlightProtectStep(StepBase):
    summary: ClassVar[str] = (
        "Soft knee highlight compression to prevent clipping. A fixed safety clamp, not scaled by strength."
    )

    step: Literal["highlight_protect"] = "highlight_protect"
    knee_start: float = Field(ge=0.0, lt=1.0, description="Luminance where compression begins (0.0-1.0)")
    knee_ceiling: float = Field(description="Maximum output luminance")


class BlackCrushStep(StepBase):
    summary: ClassVar[str] = "Steepens the shadow ramp to push milky blacks toward true black."

    step: Literal["black_crush"] = "black_crush"
    black_threshold: float = Field(gt=0.0, description="Luminance below which full crush applies")
    crush_gamma: float = Field(gt=0.0, description="Gamma at full strength (higher = steeper crush)")
    transition_end: float = Field(le=1.0, description="Luminance where crush blends back to identity")

    @model_validator(mode="after")
    def _check_transition(self) -> "BlackCrushStep":
        if self.transition_end <= self.black_threshold:
            raise ValueError("transition_end must be greater than black_threshold")
        return self


class HueDesatStep(StepBase):
    summary: ClassVar[str] = (
        "Hue-targeted desaturation with optional hue shift. Good for neutralizing color casts."
    )

    step: Literal["hue_desat"] = "hue_desat"
    hue_center: float = Field(description="Center hue angle (0-360)")
    hue_width: float = Field(ge=0.0, description="Half-width of hue window in degrees")
    softness: float = Field(ge=0.0, description="Feathering of hue window edges")
    sat_reduce: float = Field(description="Target saturation ratio (0.45 = reduce to 45%)")
    hue_shift: float = Field(default=0.0, description="Hue rotation in degrees")
    min_sat: float = Field(default=0.02, description="Minimum saturation to trigger")
    sat_scaling_ref: Optional[float] = Field(
        default=None, gt=0.0, description="Saturation at which the effect reaches full force (unset = no scaling)"
    )


class SkinCorrectionStep(StepBase):
    summary: ClassVar[str] = (
        "Targeted hue shift using a 3-way window (hue + luminance + saturation) to isolate skin tones. "
        "The luminance window reads the original luminance, before any exposure step."
    )

    step: Literal["skin_correction"] = "skin_correction"
    hue_center: float = Field(description="Center of skin hue range")
    hue_width: float = Field(ge=0.0, description="Half-width of hue window")
    hue_soft: float = Field(ge=0.0, description="Hue window feathering")
    hue_shift: float = Field(description="Degrees to shift hue toward natural skin")
    lum_low: float = Field(description="Lower luminance bound")
    lum_high: float = Field(description="Upper luminance bound")
    lum_soft: float = Field(ge=0.0, description="Luminance window feathering")
    sat_low: float = Field(description="Lower saturation bound")
    sat_high: float = Field(description="Upper saturation bound")
    sat_soft: float = Field(ge=0.0, description="Saturation window feathering")
    sat_reduce: float = Field(default=1.0, description="Target saturation ratio for qualifying skin (1.0 = none)")
    adaptive_desat: bool = Field(default=False, description="Enable adaptive desaturation (true/false)")
    desat_ref: float = Field(default=0.20, description="Saturation above which adaptive desaturation kicks in")
    desat_slope: float = Field(default=0.5, description="Extra reduction per unit of saturation above desat_ref")

    @model_validator(mode="after")
    def _check_windows(self) -> "SkinCorrectionStep":
        if self.lum_high <= self.lum_low:
            raise ValueError("lum_high must be greater than lum_low")
        if self.sat_high <= self.sat_low:
            raise ValueError("sat_high must be greater than sat_low")
        if self.adaptive_desat and self.desat_ref >= self.sat_high:
            raise ValueError("desat_ref must be below sat_high when adaptive_desat is enabled")
        return self


class ShadowSatBoostStep(StepBase):
    summary: ClassVar[str] = "Saturation boost in shadows to counteract washed-out lifted darks."

    step: Literal["shadow_sat_boost"] = "shadow_sat_boost"
    boost: float = Field(description="Saturation boost amount (0.10 = +10%)")
    range_low: float = Field(description="Lower luminance bound")
    range_high: float = Field(description="Upper luminance bound")

    @model_validator(mode="after")
    def _check_range(self) -> "ShadowSatBoostStep":
        if self.range_high <= self.range_low:
            raise ValueError("range_high must be greater than range_low")
        return self


class SkinHighlightStep(StepBase):
    summary: ClassVar[str] = (
        "Skin-targeted highlight rolloff with desaturation, plus gentle global highlight protection."
    )

    step: Literal["skin_highlight"] = "skin_highlight"
    skin_hue_center: float = Field(description="Center of skin hue range")
    skin_hue_width: float = Field(ge=0.0, description="Half-width")
    skin_softness: float = Field(ge=0.0, description="Feathering")
    knee_start: float = Field(ge=0.0, lt=1.0, description="Skin highlight knee")
    knee_ceiling: float = Field(description="Skin max luminance")
    global_knee: float = Field(ge=0.0, lt=1.0, description="Global highlight knee")
    global_ceiling: float = Field(description="Global max luminance")
    hot_desat: float = Field(description="Desaturation ratio for blown skin")
    min_sat_ratio: float = Field(gt=0.0, description="Minimum saturation for skin detection")


class SkinRolloffStep(StepBase):
    summary: ClassVar[str] = (
        "Skin-targeted luminance rolloff blended by skin strength. Used for overexposure correction."
    )

    step: Literal["skin_rolloff"] = "skin_rolloff"
    skin_hue_center: float = Field(description="Center of skin hue range")
    skin_hue_width: float = Field(ge=0.0, description="Half-width")
    skin_softness: float = Field(ge=0.0, description="Feathering")
    knee_start: float = Field(ge=0.0, lt=1.0, description="Rolloff start luminance")
    knee_ceiling: float = Field(description="Max luminance for skin")
    min_sat: float = Field(description="Minimum saturation gate")
    sat_ramp: float = Field(default=0.1, gt=0.0, description="Saturation at which skin rolloff reaches full force")


class GlobalHighlightDesatStep(StepBase):
    summary: ClassVar[str] = "Desaturate blown highlights across the entire image."

    step: Literal["global_highlight_desat"] = "global_highlight_desat"
    threshold: float = Field(ge=0.0, lt=1.0, description="Luminance above which desat begins")
    desat_amount: float = Field(description="Maximum desat ratio")


Step = Annotated[
    Union[
        RgbRebalanceStep,
        ExposureStep,
        HighlightProtectStep,
        BlackCrushStep,
        HueDesatStep,
        SkinCorrectionStep,
        ShadowSatBoostStep,
        SkinHighlightStep,
        SkinRolloffStep,
        GlobalHighlightDesatStep,
    ],
    Field(discriminator="step"),
]

# Step id -> record class, in documentation order
STEP_TYPES: Dict[str, Type[StepBase]] = {
    cls.model_fields["step"].default: cls
    for cls in (
        RgbRebalanceStep,
        ExposureStep,
        HighlightProtectStep,
        BlackCrushStep,
        HueDesatStep,
        SkinCorrectionStep,
        ShadowSatBoostStep,
        SkinHighlightStep,
        SkinRolloffStep,
        GlobalHighlightDesatStep,
    )
}

_pipeline_adapter = TypeAdapter(List[Step])


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into one line per problem."""
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        if err["type"] == "union_tag_invalid":
            tag = err.get("ctx", {}).get("tag")
            problems.append(f"{loc}: unknown step type '{tag}' (known: {', '.join(STEP_TYPES)})")
        elif err["type"] == "union_tag_not_found":
            problems.append(f"{loc}: step is missing its 'step' type field")
        else:
            problems.append(f"{loc}: {err['msg']}")
    return "; ".join(problems)


def parse_pipeline(descriptors: Sequence[Mapping[str, Any]], preset: Optional[str] = None) -> List[Step]:
    """
    Validate raw step descriptors into typed step records.

    Args:
        descriptors: Ordered list of mappings, each with a 'step' type field
            plus that step's parameters
        preset: Preset name for error messages (optional)

    Returns:
        List of step records in the original order

    Raises:
        ConfigurationError: Empty pipeline, unknown step type, or missing /
            unknown / out-of-domain parameter
    """
    if not descriptors:
        raise ConfigurationError("pipeline is empty or missing", preset=preset)
    try:
        return _pipeline_adapter.validate_python(list(descriptors))
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e), preset=preset) from e


def describe_step(step: StepBase) -> Dict[str, Any]:
    """Return a step's parameters (without the 'step' field) for display."""
    return step.model_dump(exclude={"step"})


def ensure_pipeline(pipeline: Sequence[Union[StepBase, Mapping[str, Any]]], preset: Optional[str] = None) -> List[StepBase]:
    """Accept parsed step records or raw descriptors and return step records."""
    if not pipeline:
        raise ConfigurationError("pipeline is empty or missing", preset=preset)
    if all(isinstance(step, StepBase) for step in pipeline):
        return list(pipeline)
    raw = [step.model_dump() if isinstance(step, StepBase) else step for step in pipeline]
    return parse_pipeline(raw, preset=preset)
