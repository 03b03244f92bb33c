"""
Data Consistency Framework Constants.

This module defines the thresholds, caps and defaults used throughout the
cross-file validation pipeline. Centralizing these values keeps the rules,
indexer and reporter in agreement and documents where each number comes from.
"""

# ============================================================================
# File Loading Constants
# ============================================================================

# Extensions the grid loader accepts (lowercase, with leading dot)
SUPPORTED_EXTENSIONS: tuple = (".csv", ".xlsx", ".xls")

# Bytes sampled when sniffing CSV delimiter and encoding
CSV_SNIFF_SAMPLE_BYTES: int = 8192

# Encodings tried, in order, when reading CSV files
CSV_CANDIDATE_ENCODINGS: tuple = ("utf-8", "utf-8-sig", "cp1252", "latin-1")


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB is plenty for engine settings)
MAX_YAML_FILE_SIZE: int = 1 * 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items in a YAML document
MAX_YAML_KEY_COUNT: int = 10_000

# Maximum length for any single YAML string value
MAX_STRING_LENGTH: int = 64 * 1024


# ============================================================================
# Relationship Detection Constants
# ============================================================================

# Relationships are kept only when confidence is strictly above this value
RELATIONSHIP_CONFIDENCE_THRESHOLD: float = 0.7

# Confidence above this value is reported as an exact match
EXACT_MATCH_CONFIDENCE: float = 0.95

# Confidence assigned to naming-convention matches (customer_id <-> customer)
NAMING_CONVENTION_CONFIDENCE: float = 0.9

# Levenshtein similarity a pair of names must exceed to count as fuzzy
FUZZY_SIMILARITY_THRESHOLD: float = 0.8

# Discount applied to pure string similarity relative to semantic matches
FUZZY_CONFIDENCE_FACTOR: float = 0.8


# ============================================================================
# Statistics Constants
# ============================================================================

# Share of non-empty values that must parse for a column to be numeric/date
TYPE_DETECTION_RATIO: float = 0.8

# Relative date words pandas accepts but a date column must not contain
RELATIVE_DATE_WORDS: frozenset = frozenset({"now", "today", "tomorrow", "yesterday"})

# Decimal places kept for mean and standard deviation
STATS_ROUNDING_DIGITS: int = 2

# Separator used when concatenating cell values for row hashing
ROW_HASH_SEPARATOR: str = "|"


# ============================================================================
# Rule Defaults
# ============================================================================

# Minimum completeness percentage before a column is flagged
DEFAULT_MIN_COMPLETENESS: float = 95.0

# Completeness below this percentage escalates the issue to critical
CRITICAL_COMPLETENESS: float = 50.0

# Columns with this many empty cells or fewer (but at least one) get a minor issue
MINOR_EMPTY_CELL_LIMIT: int = 5

# Literal tokens treated as empty cells, case as listed
EMPTY_TOKENS: frozenset = frozenset({"NULL", "null", "N/A", "n/a"})

# Outlier detection defaults
DEFAULT_OUTLIER_METHOD: str = "iqr"
DEFAULT_IQR_MULTIPLIER: float = 1.5
DEFAULT_ZSCORE_THRESHOLD: float = 2.5

# Normal-distribution quartile offset in standard deviations (Q1/Q3 approximation)
QUARTILE_Z_OFFSET: float = 0.6745

# Outliers with |z| above this value make the issue critical
EXTREME_Z_SCORE: float = 3.0

# Outliers per unique value above this ratio make the issue a warning
OUTLIER_DENSITY_RATIO: float = 0.1

# Default numeric tolerance carried into value range metadata
DEFAULT_TOLERANCE: float = 0.01


# ============================================================================
# Issue Size Limits
# ============================================================================

# Affected rows kept per referential integrity issue
MAX_REFERENTIAL_AFFECTED_ROWS: int = 50

# Distinct missing values quoted in a referential integrity suggestion
MAX_MISSING_VALUE_EXAMPLES: int = 5

# Valid reference values recorded in issue metadata
MAX_AVAILABLE_VALUE_SAMPLES: int = 10

# Affected rows kept per completeness issue
MAX_COMPLETENESS_AFFECTED_ROWS: int = 100

# Empty rows listed inline in a completeness suggestion
MAX_INLINE_EMPTY_ROWS: int = 10

# Affected rows kept per value range issue
MAX_RANGE_AFFECTED_ROWS: int = 50

# Sample extreme values quoted per side in a value range suggestion
MAX_OUTLIER_SAMPLES: int = 3


# ============================================================================
# Engine / Reporter Constants
# ============================================================================

# Rule ids, in default execution order
RULE_REFERENTIAL_INTEGRITY: str = "referential_integrity"
RULE_DATA_COMPLETENESS: str = "data_completeness"
RULE_VALUE_RANGES: str = "value_ranges"
DEFAULT_RULES: tuple = (RULE_REFERENTIAL_INTEGRITY, RULE_DATA_COMPLETENESS, RULE_VALUE_RANGES)

# Rule id used for the synthetic issue produced when the pipeline fails
ENGINE_RULE_NAME: str = "validation_engine"

# Worker threads used to run rules concurrently
DEFAULT_MAX_CONCURRENT_VALIDATIONS: int = 5

# Report formats
REPORT_FORMATS: tuple = ("summary", "detailed")
DEFAULT_REPORT_FORMAT: str = "detailed"

# Width of report section rules
REPORT_RULE_WIDTH: int = 50
REPORT_FILE_RULE_WIDTH: int = 30

# Affected rows shown per issue in the detailed report / top-issues report
REPORT_DETAIL_ROW_SAMPLES: int = 10
REPORT_TOP_ROW_SAMPLES: int = 5

# Missing values shown per issue in the detailed report
REPORT_MISSING_VALUE_SAMPLES: int = 5

# Number of issues listed in the top-issues report
REPORT_TOP_ISSUES: int = 5
