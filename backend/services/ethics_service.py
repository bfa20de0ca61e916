"""
Ethical Analysis Service client

Hands DatasetStatistics to the remote ethical-analysis service and parses
its structured assessment:
- suitability score and overall risk level
- privacy evaluation and bias assessment
- recommendations

Safety:
- Explicit request timeout
- Every failure surfaces as EthicalServiceUnavailableError so callers can
  degrade to statistics-only results
"""
import httpx
from typing import Optional
from pydantic import ValidationError
from loguru import logger

from config import settings
from exceptions import EthicalServiceUnavailableError
from models.ethics import EthicalAnalysis
from models.statistics import DatasetStatistics


class EthicalAnalysisClient:
    """
    Ethical analysis API client with timeout handling.
    """

    def __init__(
        self,
        url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.ETHICS_SERVICE_URL
        self.timeout = timeout or settings.ETHICS_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def analyze_ethics(self, statistics: DatasetStatistics, project_id: str) -> EthicalAnalysis:
        """
        Request an ethical assessment for a dataset.

        Args:
            statistics: Result of the statistical analysis
            project_id: Project the dataset belongs to

        Returns:
            EthicalAnalysis parsed from the service response

        Raises:
            EthicalServiceUnavailableError: timeout, network or HTTP error,
                or a response that is not a valid assessment
        """
        if not self.url:
            raise EthicalServiceUnavailableError("Ethical analysis service is not configured")

        payload = {
            "statistics": statistics.to_payload(),
            "project_identifier": project_id,
        }

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()

            # Some deployments wrap the assessment in an envelope
            if isinstance(data, dict) and isinstance(data.get("ethical_analysis"), dict):
                data = data["ethical_analysis"]

            return EthicalAnalysis.model_validate(data)

        except httpx.TimeoutException:
            logger.error(f"Ethical analysis request timed out after {self.timeout}s")
            raise EthicalServiceUnavailableError(
                f"Request timed out after {self.timeout}s"
            )
        except httpx.HTTPStatusError as e:
            logger.error(f"Ethical analysis HTTP error: {e.response.status_code}")
            raise EthicalServiceUnavailableError(
                f"HTTP error: {e.response.status_code}",
                details={"status_code": e.response.status_code},
            )
        except httpx.HTTPError as e:
            logger.error(f"Ethical analysis network error: {e}")
            raise EthicalServiceUnavailableError(f"Network error: {e}")
        except (ValueError, ValidationError) as e:
            logger.warning(f"Failed to parse ethical analysis response: {e}")
            raise EthicalServiceUnavailableError(f"Invalid response from ethical analysis service: {e}")

    async def close(self):
        """Close the HTTP client"""
        await self._client.aclose()
