"""fsmirror - Checksummed directory trees and three-tier directory mirroring."""

__version__ = "0.1.0"

# File constants
CONFIG_FILE = ".fsmirror.json"
ENV_PREFIX = "FSMIRROR_"
