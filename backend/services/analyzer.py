"""
Dataset analysis orchestration.

validate -> parse -> per-column profiles -> basic metrics, quality, privacy,
bias and distribution -> one immutable DatasetStatistics. A run either
returns a complete result or raises a typed error; there are no partial
results.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from config import AnalysisPolicy, settings
from exceptions import EmptyDatasetError
from models.statistics import ColumnProfile, DatasetStatistics
from services.bias import detect_bias
from services.data_formats import DataReader, DatasetFile, validate_upload
from services.distribution import summarize_distributions
from services.metrics import assess_quality, column_values, compute_basic_metrics, profile_column
from services.privacy import assess_privacy_risks

# Thread pool for CPU-bound parsing and profiling
_executor = ThreadPoolExecutor(max_workers=settings.ANALYSIS_WORKERS)


def profile_columns(
    rows: Sequence[Dict[str, Any]],
    columns: List[str],
    policy: AnalysisPolicy,
    max_workers: Optional[int] = None,
) -> List[ColumnProfile]:
    """Profile every column; wide tables fan out over a thread pool"""
    def _profile(name: str) -> ColumnProfile:
        return profile_column(name, column_values(rows, name), policy)

    if len(columns) < policy.parallel_column_threshold:
        return [_profile(name) for name in columns]

    workers = max_workers or settings.ANALYSIS_WORKERS
    logger.debug(f"Profiling {len(columns)} columns on {workers} threads")
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # map() keeps column order
        return list(pool.map(_profile, columns))


def analyze_rows(
    rows: Sequence[Dict[str, Any]],
    file_size: int = 0,
    policy: Optional[AnalysisPolicy] = None,
) -> DatasetStatistics:
    """Compute statistics for an already parsed table"""
    policy = policy or settings.ANALYSIS

    if not rows:
        raise EmptyDatasetError("No data found in file")

    columns = list(rows[0].keys())
    if not columns:
        raise EmptyDatasetError("No columns detected in data")

    profiles = profile_columns(rows, columns, policy)

    basic_metrics = compute_basic_metrics(rows, profiles, file_size)
    statistics = DatasetStatistics(
        basic_metrics=basic_metrics,
        column_analysis=profiles,
        distribution_stats=summarize_distributions(rows, profiles, policy),
        quality_assessment=assess_quality(basic_metrics, profiles, policy),
        bias_indicators=detect_bias(rows, profiles, policy),
        privacy_risks=assess_privacy_risks(profiles, basic_metrics.total_rows, policy),
    )

    logger.info(
        f"Analyzed {basic_metrics.total_rows:,} rows × {basic_metrics.total_columns} columns: "
        f"completeness {statistics.quality_assessment.completeness_score}%, "
        f"{len(statistics.privacy_risks.potential_identifiers)} pattern-flagged identifier(s)"
    )
    return statistics


def analyze_dataset(file: DatasetFile, policy: Optional[AnalysisPolicy] = None) -> DatasetStatistics:
    """
    Analyze one uploaded file.

    Raises:
        UnsupportedFormatError: format needs manual assessment
        FileTooLargeError: over the hard size limit
        ParseError / EmptyDatasetError: malformed or empty content
    """
    policy = policy or settings.ANALYSIS
    validate_upload(file, policy)
    return parse_and_analyze(file, policy)


def parse_and_analyze(file: DatasetFile, policy: Optional[AnalysisPolicy] = None) -> DatasetStatistics:
    """Parse and analyze an upload the caller has already validated"""
    rows = DataReader.read(file)
    return analyze_rows(rows, file_size=file.size, policy=policy)


async def analyze_dataset_async(
    file: DatasetFile,
    policy: Optional[AnalysisPolicy] = None,
    validated: bool = False,
) -> DatasetStatistics:
    """analyze_dataset on the worker pool, keeping the event loop responsive"""
    loop = asyncio.get_running_loop()
    analyze = parse_and_analyze if validated else analyze_dataset
    return await loop.run_in_executor(_executor, analyze, file, policy)
