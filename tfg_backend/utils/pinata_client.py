# tfg_backend/utils/pinata_client.py
"""
Cliente HTTP de Pinata (IPFS) para los PDFs de los TFGs.

Recibe la configuración por constructor; no lee variables de entorno.
"""
import json
import logging
import re

import requests

from tfg_backend.core.config import Settings
from tfg_backend.core.exceptions import AppError

logger = logging.getLogger(__name__)

CID_PATTERN = re.compile(r"ipfs/(.+)$")


class PinataClient:
    def __init__(self, config: Settings):
        self.api_url = config.pinata_api_url.rstrip("/")
        self.gateway = config.pinata_gateway_url.strip("/")
        self.timeout = config.pinata_timeout
        self.headers = {
            "pinata_api_key": config.pinata_api_key,
            "pinata_secret_api_key": config.pinata_secret_key,
        }

    def upload(self, content: bytes, filename: str) -> str:
        """Sube el archivo y devuelve su URL pública en el gateway."""
        response = requests.post(
            f"{self.api_url}/pinning/pinFileToIPFS",
            files={"file": (filename, content, "application/pdf")},
            data={
                "pinataMetadata": json.dumps({"name": filename}),
                "pinataOptions": json.dumps({"cidVersion": 0}),
            },
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        cid = response.json()["IpfsHash"]
        logger.info("Archivo subido a Pinata", extra={"cid": cid, "file_name": filename})
        return f"https://{self.gateway}/ipfs/{cid}"

    def fetch(self, url: str) -> bytes:
        if not url:
            raise AppError("FILE_URL_INVALID")
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Error descargando archivo: %s", e, extra={"url": url})
            raise AppError("FILE_FETCH_ERROR") from e
        if not response.ok:
            logger.error(
                "Pinata devolvió %s al descargar", response.status_code, extra={"url": url}
            )
            raise AppError("PINATA_FETCH_ERROR")
        return response.content

    def delete(self, url: str) -> None:
        if not url:
            raise AppError("FILE_URL_INVALID")
        match = CID_PATTERN.search(url)
        if not match:
            raise AppError("CID_NOT_FOUND")
        cid = match.group(1)
        try:
            response = requests.delete(
                f"{self.api_url}/pinning/unpin/{cid}",
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Error contactando con Pinata: %s", e, extra={"cid": cid})
            raise AppError("PINATA_API_ERROR") from e
        if not response.ok:
            logger.error("Pinata devolvió %s al eliminar", response.status_code, extra={"cid": cid})
            raise AppError("PINATA_API_ERROR")
        logger.info("Archivo eliminado de Pinata", extra={"cid": cid})
