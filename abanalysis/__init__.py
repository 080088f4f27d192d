"""Core statistics for comparing a control sample against a test sample."""

from .statistics import (
    AnalysisResult,
    ConfidenceInterval,
    GroupSummary,
    InvalidInput,
    analyze,
    classify_effect_size,
    cohens_d,
    confidence_interval,
    format_p_value,
    generate_conclusion,
    manual_summary,
    p_value,
    standard_normal_cdf,
    statistical_power,
    summarize_sample,
    z_score,
)
from .data_loader import read_sample, preview_table, export_sample_csv
