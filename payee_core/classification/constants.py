"""Constants for payee classification."""


class ConfidenceThreshold:
    """Confidence thresholds governing tier escalation."""
    HIGH = 95
    MEDIUM = 85
    REVIEW_REQUIRED = 75
    ESCALATE_TO_AI = 65
    FORCE_WEB_SEARCH = 50


class Classification:
    """Classification labels."""
    BUSINESS = "Business"
    INDIVIDUAL = "Individual"

    ALL = (BUSINESS, INDIVIDUAL)


class ProcessingTier:
    """Processing tier tags attached to every result."""
    EXCLUDED = "Excluded"
    RULE_BASED = "Rule-Based"
    NLP_BASED = "NLP-Based"
    AI_POWERED = "AI-Powered"
    FAILED = "Failed"


class BatchState:
    """Batch job status values."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    TERMINAL = (COMPLETED, CANCELLED, FAILED)


# Keyword exclusion
FUZZY_EXCLUSION_THRESHOLD = 90
FUZZY_MIN_LENGTH = 4
EXACT_MATCH_CONFIDENCE = 100
NO_MATCH_REASONING = "No exclusion keywords matched"

# Extended rule confidence weights (per matched rule)
EXTENDED_BUSINESS_WEIGHT = 3
EXTENDED_INDIVIDUAL_WEIGHT = 4

# NLP / fuzzy tier
NAME_SIMILARITY_THRESHOLD = 85
NLP_MAX_CONFIDENCE = 85

# Batch fallback records
FAILED_ITEM_CONFIDENCE = 30
FAILED_ITEM_METHOD = "Error fallback"
CANCELLED_ITEM_METHOD = "Cancelled"

# Confidence buckets for batch statistics
HIGH_CONFIDENCE_BUCKET = ConfidenceThreshold.MEDIUM
MEDIUM_CONFIDENCE_BUCKET = ConfidenceThreshold.REVIEW_REQUIRED

# Default configuration values
DEFAULT_MAX_WORKERS = 1
DEFAULT_AI_CONSENSUS_RUNS = 2
DEFAULT_BATCH_CACHE_SIZE = 10000
DEFAULT_KEYWORD_CACHE_TTL_SECONDS = 300
DEFAULT_MAX_RETAINED_BATCHES = 100
MAX_KEYWORD_LENGTH = 100
