"""Provider request signers.

Each provider mandates its own canonical string and MAC; the three modules
share nothing beyond the HMAC primitive on purpose.
"""

from . import aliyun, aws, tencent

__all__ = ["aliyun", "aws", "tencent"]
