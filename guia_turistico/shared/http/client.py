"""Cliente HTTP com retentativas"""

from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions.errors import HTTPError, NetworkError
from ..logging.config import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "guia-turistico/0.1 (python-requests)"


def redact_url(url: str) -> str:
    """URL sem a query string"""
    return url.split("?", 1)[0]


class HTTPClient:
    """
    Cliente HTTP com retentativas

    Features:
    - Retentativa automática com backoff exponencial (apenas erros 5xx)
    - Timeout por requisição
    - Sessão reutilizada com User-Agent fixo (exigido pela política do Nominatim)
    """

    def __init__(
        self,
        timeout: float = 10,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        status_forcelist: tuple[int, ...] = (500, 502, 503, 504),
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            timeout: timeout da requisição (segundos)
            max_retries: número máximo de retentativas
            backoff_factor: fator de backoff
            status_forcelist: códigos de status que disparam retentativa
            user_agent: cabeçalho User-Agent
            session: sessão pronta (testes); se omitida uma nova é criada
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.status_forcelist = status_forcelist
        self.user_agent = user_agent or DEFAULT_USER_AGENT

        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Cria a sessão"""
        session = requests.Session()

        # 429 e 425 não entram na lista: quem chama precisa distingui-los
        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.status_forcelist,
            allowed_methods=["HEAD", "GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
                "Accept-Language": "pt-BR,pt;q=0.9",
            }
        )

        return session

    def get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """
        Requisição GET

        Args:
            url: URL da requisição
            params: parâmetros de query
            headers: cabeçalhos adicionais

        Returns:
            objeto de resposta

        Raises:
            NetworkError: sem resposta do servidor
            HTTPError: resposta com status de erro
        """
        # A query string carrega coordenadas: fica fora dos logs e mensagens de erro
        safe_url = redact_url(url)
        try:
            logger.debug(f"GET request to {safe_url}")
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"GET request failed: {safe_url} - {type(e).__name__}")
            raise NetworkError(f"Failed to fetch {safe_url}: {type(e).__name__}") from e
        except requests.RequestException as e:
            logger.error(f"GET request failed: {safe_url} - {type(e).__name__}")
            raise HTTPError(f"Failed to GET {safe_url}: {type(e).__name__}") from e

        if not response.ok:
            logger.error(f"GET request failed: {safe_url} (status={response.status_code})")
            raise HTTPError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(f"GET request successful: {safe_url} (status={response.status_code})")
        return response

    def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        Requisição GET decodificando o corpo JSON

        Raises:
            HTTPError: falha na requisição ou corpo que não é JSON
        """
        response = self.get(url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as e:
            raise HTTPError(
                f"Invalid JSON response from {redact_url(url)}: {e}",
                status_code=response.status_code,
            ) from e

    def close(self) -> None:
        """Fecha a sessão"""
        if self.session:
            self.session.close()
            logger.debug("HTTP session closed")

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
