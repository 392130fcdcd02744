"""Errors raised while configuring the generator or building proofs."""


class DPoPError(Exception):
    """Base class for okta_dpop errors."""

    code = "dpop_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DPoPConfigurationError(DPoPError):
    """The generator could not be configured (missing config, bad key material)."""

    code = "configuration_error"


class DPoPProofGenerationError(DPoPError):
    """A proof could not be generated. The original exception is ``__cause__``."""

    code = "proof_generation_error"
