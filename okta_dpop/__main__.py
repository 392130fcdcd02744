"""Cross-implementation DPoP interop checks.

Usage:
    python -m okta_dpop generate [proof_file]
    python -m okta_dpop validate <proof_file>
"""

import json
import sys

from .client import DPoPProofGenerator
from .config import ClientConfiguration
from .errors import DPoPError
from .server import DPoPConfig, DPoPValidationError, validate_proof, verify_binding

METHOD = "POST"
DOMAIN = "https://cross-test.example.com"


def generate(output_file: str) -> None:
    """Generate a proof and save to file."""
    generator = DPoPProofGenerator(ClientConfiguration(okta_domain=DOMAIN))
    proof = generator.generate_proof(http_method=METHOD)

    data = {
        "proof": proof,
        "thumbprint": generator.thumbprint,
        "method": METHOD,
        "target": generator.token_endpoint,
    }

    with open(output_file, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Generated proof: {output_file}")


def validate(input_file: str) -> int:
    """Validate a proof from file."""
    with open(input_file) as f:
        data = json.load(f)

    config = DPoPConfig(
        max_proof_age_secs=300,
        require_nonce=False,
        expected_method=data["method"],
        expected_target=data["target"],
    )

    try:
        thumbprint = validate_proof(data["proof"], config)
        verify_binding(thumbprint, data["thumbprint"])
    except DPoPValidationError as e:
        print(f"FAIL: {e.code}: {e.message}", file=sys.stderr)
        return 1

    print(f"PASS: {input_file} validated successfully")
    return 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python -m okta_dpop <generate|validate> [proof_file]", file=sys.stderr)
        return 1

    command = argv[0]

    try:
        if command == "generate":
            generate(argv[1] if len(argv) > 1 else "python_proof.json")
            return 0
        if command == "validate":
            if len(argv) < 2:
                print("Usage: python -m okta_dpop validate <proof_file>", file=sys.stderr)
                return 1
            return validate(argv[1])
    except DPoPError as e:
        print(f"FAIL: {e.code}: {e.message}", file=sys.stderr)
        return 1

    print(f"Unknown command: {command}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
