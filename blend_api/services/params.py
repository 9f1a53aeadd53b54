from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from blend_api.services.blend import ToneParams, WeightSet


class BlendParams(BaseModel):
	"""User facing blend controls, bounded to the slider ranges of the upload form."""

	under_weight: float = Field(1.0, ge=0.0, le=3.0)
	balanced_weight: float = Field(1.0, ge=0.0, le=3.0)
	over_weight: float = Field(1.0, ge=0.0, le=3.0)
	gamma: float = Field(1.0, ge=0.1, le=3.0)
	contrast: float = Field(1.0, ge=0.0, le=3.0)
	saturation: float = Field(1.0, ge=0.0, le=3.0)

	@model_validator(mode="after")
	def _check_total_weight(self) -> "BlendParams":
		if self.under_weight + self.balanced_weight + self.over_weight <= 0:
			raise ValueError("at least one exposure weight must be greater than zero")
		return self

	def weights(self) -> WeightSet:
		return WeightSet(under=self.under_weight, balanced=self.balanced_weight, over=self.over_weight)

	def tone(self) -> ToneParams:
		return ToneParams(gamma=self.gamma, contrast=self.contrast, saturation=self.saturation)
