# app/services/product_client.py
import requests
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from requests import RequestException

from app.domain.errors import PersistenceFailure
from app.domain.schemas import ProductOut
from app.utils.settings import PRODUCT_SERVICE_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(RequestException),
    )

class ProductClient:
    """Klient katalogu produktow (product-service, zewnetrzny)."""

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    def _request(self, product_id: int) -> requests.Response:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        #404 to odpowiedz, nie blad transportu - bez retry
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    @http_retry()
    def _get(self, product_id: int) -> requests.Response:
        return self._request(product_id)

    def fetch_product(self, product_id: int, retry: bool = True) -> ProductOut | None:
        """
        retry=False dla danych tylko do wyswietlenia - jedna proba,
        wolny katalog nie blokuje odpowiedzi koszyka.
        """
        resp = self._get(product_id) if retry else self._request(product_id)
        if resp.status_code == 404:
            return None

        try:
            return ProductOut.model_validate(resp.json())
        except ValidationError as e:
            # bez ceny nie ma snapshotu, nie zgadujemy
            logger.error(f"Product {product_id} payload rejected: {e}")
            raise PersistenceFailure(f"Invalid product data for {product_id}") from e
