"""
Services package
"""
from services.data_formats import DataReader, DataFormat, DatasetFile, detect_format, validate_upload
from services.analyzer import analyze_dataset, analyze_dataset_async, analyze_rows
from services.ethics_service import EthicalAnalysisClient
from services.session import AnalysisSession, SessionRegistry

__all__ = [
    "DataReader",
    "DataFormat",
    "DatasetFile",
    "detect_format",
    "validate_upload",
    "analyze_dataset",
    "analyze_dataset_async",
    "analyze_rows",
    "EthicalAnalysisClient",
    "AnalysisSession",
    "SessionRegistry",
]
