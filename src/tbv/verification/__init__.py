"""
The `verification` sub-package implements the phases that check a published
package against the source commit it claims to be built from:

- registry: resolve version, repository and digest from registry metadata.
- checkout: shallow-fetch the claimed commit or tag into a fresh directory.
- pack: reproduce the archive digest, installing dependencies if needed.
- compare: check the reproduced digest against the published one.
"""

from .pipeline import Verifier, verify

__all__ = ["Verifier", "verify"]
