"""
Constants for the contour locator, color sampler and feature heuristics.

These are empirically chosen thresholds. They are kept here so they can be
tuned without touching the detection logic.
"""

# =============================================================================
# Contour Locator Constants
# =============================================================================

# Sample every Nth pixel in each axis
CONTOUR_SAMPLE_STRIDE = 3

# Background classification: near-white or near-black in every channel
BACKGROUND_WHITE_MIN = 200  # all channels > this = near-white
BACKGROUND_BLACK_MAX = 50   # all channels < this = near-black


# =============================================================================
# Color Sampler Constants
# =============================================================================

# Channel quantization bucket size (256 levels -> 8 buckets per channel)
COLOR_QUANTIZATION_STEP = 32

# Stride = max(MIN, floor(sqrt(region area) / DIVISOR))
COARSE_SAMPLING_DIVISOR = 50
COARSE_SAMPLING_MIN_STEP = 2
FINE_SAMPLING_DIVISOR = 150
FINE_SAMPLING_MIN_STEP = 1

DEFAULT_NUM_COLORS = 5


# =============================================================================
# Field Spot Constants
# =============================================================================

# Search region as fractions of the bounding box
FIELD_SPOT_REGION_TOP_FRACTION = 0.5     # start halfway down the box
FIELD_SPOT_REGION_HEIGHT_FRACTION = 0.5  # cover the lower half

# Yellowish classification (brightness minima per rule)
YELLOWISH_TRADITIONAL_MIN_BRIGHTNESS = 80
YELLOWISH_CREAM_MIN_BRIGHTNESS = 90
YELLOWISH_CREAM_GB_RATIO = 1.1
YELLOWISH_LIGHT_BROWN_MIN_BRIGHTNESS = 70
YELLOWISH_LIGHT_BROWN_RB_RATIO = 1.2
YELLOWISH_BEIGE_MIN_BRIGHTNESS = 85
YELLOWISH_BEIGE_MAX_RG_DIFF = 30
YELLOWISH_BEIGE_RB_RATIO = 1.3

# Scoring tiers: (min yellowness, min r, min g, max b, cap,
#                 yellowness divisor, yellowness weight, percentage divisor, percentage weight)
FIELD_SPOT_TIER_STRONG = (40, 140, 110, 110, 100, 80, 70, 15, 30)
FIELD_SPOT_TIER_MODERATE = (15, 110, 90, 130, 70, 60, 45, 20, 25)
FIELD_SPOT_TIER_PALE = (5, 85, 75, 140, 50, 40, 30, 25, 20)
FIELD_SPOT_TIER_VERY_PALE = (0, 75, 65, 150, 35, 30, 20, 30, 15)
FIELD_SPOT_VERY_PALE_MIN_BRIGHTNESS = 70

# Tan/beige fallback tier
FIELD_SPOT_TAN_RB_RATIO = 1.1
FIELD_SPOT_TAN_MIN_BRIGHTNESS = 60
FIELD_SPOT_TAN_MAX_BRIGHTNESS = 180
FIELD_SPOT_TAN_RB_DIVISOR = 4
FIELD_SPOT_TAN_PERCENTAGE_DIVISOR = 40
FIELD_SPOT_TAN_PERCENTAGE_WEIGHT = 10
FIELD_SPOT_TAN_CAP = 25

# Description bands
FIELD_SPOT_EXCELLENT_THRESHOLD = 70  # > 70
FIELD_SPOT_GOOD_THRESHOLD = 45       # > 45
FIELD_SPOT_MODERATE_THRESHOLD = 25   # > 25
FIELD_SPOT_FAINT_THRESHOLD = 10      # >= 10
FIELD_SPOT_VERY_FAINT_THRESHOLD = 5  # > 5

FIELD_SPOT_DEFAULT_SCORE = 50


# =============================================================================
# Stem Color Constants
# =============================================================================

# Search region: top-center of the bounding box
STEM_REGION_LEFT_FRACTION = 0.3
STEM_REGION_WIDTH_FRACTION = 0.4
STEM_REGION_HEIGHT_FRACTION = 0.3

# Brownness proxy = min(r, g * G_FACTOR, b * B_FACTOR)
STEM_BROWNNESS_G_FACTOR = 0.8
STEM_BROWNNESS_B_FACTOR = 0.6

# Dry brown bands (exclusive bounds)
STEM_DRY_R_RANGE = (80, 180)
STEM_DRY_G_RANGE = (60, 150)
STEM_DRY_B_RANGE = (40, 120)
STEM_DRY_MAX_RG_DIFF = 50

# Brown score = min(100, brownness / 80 * 70 + percentage / 15 * 30)
STEM_BROWN_BROWNNESS_DIVISOR = 80
STEM_BROWN_BROWNNESS_WEIGHT = 70
STEM_BROWN_PERCENTAGE_DIVISOR = 15
STEM_BROWN_PERCENTAGE_WEIGHT = 30

# Green penalty: greenness = g - (r + b) / 2
STEM_GREENNESS_MIN = 30
STEM_GREEN_MIN_G = 100
STEM_GREEN_PENALTY_WEIGHT = 40  # penalty += percentage / 100 * weight

# Stem considered not visible when both brown score and penalty are below this
STEM_NOT_VISIBLE_THRESHOLD = 10
STEM_NEUTRAL_SCORE = 65

# Description bands
STEM_EXCELLENT_THRESHOLD = 75
STEM_MODERATE_THRESHOLD = 50
STEM_GREEN_DESCRIPTION_PENALTY = 20
STEM_PARTIAL_THRESHOLD = 25
STEM_UNCLEAR_THRESHOLD = 10
STEM_POOR_FLOOR_SCORE = 35

STEM_DEFAULT_SCORE = 50


# =============================================================================
# Skin Dullness Constants
# =============================================================================

DULLNESS_SAMPLE_STEP = 8
DULLNESS_REGION_FRACTION = 0.3  # of the smaller bounding box side
DULLNESS_MIN_SAMPLES = 5

DULLNESS_STD_MULTIPLIER = 2          # variation score = 100 - std * this
DULLNESS_IDEAL_BRIGHTNESS = 128
DULLNESS_VARIATION_WEIGHT = 0.7
DULLNESS_BRIGHTNESS_WEIGHT = 0.3

# Description bands
DULLNESS_EXCELLENT_THRESHOLD = 75
DULLNESS_GOOD_THRESHOLD = 60
DULLNESS_MODERATE_THRESHOLD = 45
DULLNESS_SOMEWHAT_SHINY_THRESHOLD = 30

DULLNESS_DEFAULT_SCORE = 50


# =============================================================================
# Shape Ratio Constants
# =============================================================================

SHAPE_IDEAL_RATIO = 1.0

# Multiplier bands (inclusive bounds)
SHAPE_ROUND_RANGE = (0.95, 1.05)
SHAPE_ROUND_MULTIPLIER = 1.2
SHAPE_SLIGHTLY_WIDE_RANGE = (1.05, 1.15)
SHAPE_SLIGHTLY_WIDE_MULTIPLIER = 1.1
SHAPE_ELONGATED_DEVIATION = 0.3
SHAPE_ELONGATED_MULTIPLIER = 0.7

# Shape type band upper bounds
SHAPE_VERY_TALL_MAX = 0.7       # < 0.7
SHAPE_TALL_MAX = 0.85           # < 0.85
SHAPE_SLIGHTLY_TALL_MAX = 0.95  # < 0.95
SHAPE_ROUND_MAX = 1.05          # <= 1.05
SHAPE_SLIGHTLY_WIDE_MAX = 1.2   # <= 1.2
SHAPE_WIDE_MAX = 1.4            # <= 1.4

SHAPE_DEFAULT_SCORE = 50


# =============================================================================
# Webbing Density Constants
# =============================================================================

# Search region: central 80% of the bounding box
WEBBING_REGION_MARGIN_FRACTION = 0.1
WEBBING_REGION_SIZE_FRACTION = 0.8

WEBBING_SAMPLING_DIVISOR = 60
WEBBING_SAMPLING_MIN_STEP = 2
WEBBING_CLUSTER_RADIUS_FACTOR = 3  # cluster radius = stride * this
WEBBING_MIN_CLUSTER_SIZE = 3

# Brown pixel detection
WEBBING_YELLOWISH_GB_RATIO = 1.2
# Tiers: (max brightness, r/g ratio, second ratio, cap, r-b divisor, r-g divisor)
WEBBING_STRONG_TIER = (120, 1.1, 1.3, 100, 2, 4)   # r > g*1.1, r > b*1.3
WEBBING_MEDIUM_TIER = (160, 1.0, 0.8, 80, 3, 6)    # r > g,     g > b*0.8
WEBBING_LIGHT_TIER = (200, 0.9, 1.1, 60, 4, 8)     # r > g*0.9, r > b*1.1
WEBBING_BROWNNESS_THRESHOLD = 15

# Reference rind color used for contrast
WATERMELON_GREEN_RGB = (80, 120, 60)

# Cluster scoring caps and weights
CLUSTER_BROWNNESS_WEIGHT = 0.6
CLUSTER_BROWNNESS_CAP = 40
CLUSTER_CONTRAST_WEIGHT = 0.2
CLUSTER_CONTRAST_CAP = 20
CLUSTER_SIZE_WEIGHT = 2
CLUSTER_SIZE_CAP = 25
CLUSTER_LINE_WIDTH_WEIGHT = 0.5
CLUSTER_LINE_WIDTH_CAP = 15

# Aggregate webbing score
WEBBING_BASE_RATIO_WEIGHT = 300
WEBBING_BASE_CAP = 60
WEBBING_CLUSTER_SCORE_WEIGHT = 0.6
WEBBING_CLUSTER_DENSITY_WEIGHT = 20
WEBBING_CLUSTER_BONUS_CAP = 40
WEBBING_DENSITY_AREA_UNIT = 10000  # clusters per 100x100 px
WEBBING_DISTRIBUTION_MIN_CLUSTERS = 2
WEBBING_DISTRIBUTION_PER_CLUSTER = 5
WEBBING_DISTRIBUTION_CAP = 20

# Description bands
WEBBING_EXCELLENT_THRESHOLD = 80
WEBBING_VERY_GOOD_THRESHOLD = 65
WEBBING_GOOD_THRESHOLD = 45
WEBBING_MODERATE_THRESHOLD = 25
WEBBING_MINIMAL_THRESHOLD = 10

# Number of clusters reported in details
WEBBING_REPORTED_CLUSTERS = 5

WEBBING_DEFAULT_SCORE = 30
