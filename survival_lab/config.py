import os

from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL = os.getenv("SURVIVAL_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("SURVIVAL_LOG_JSON", "true").lower() in ("1", "true", "yes")

# Allowed drift of the canonical weight sum away from 1.0
WEIGHT_TOLERANCE = float(os.getenv("SURVIVAL_WEIGHT_TOLERANCE", "1e-9"))
