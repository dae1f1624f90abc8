# === FILE: site_crawler/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера SiteCrawler.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = ["CrawlerConfig", "ValidationError", "load_config", "read_config_data"]


class CrawlerConfig(BaseModel):
    """Параметры одного запуска обхода. Неизменяемы на всё время обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_concurrency: int = Field(10, gt=0, description="Число одновременных загрузок страниц.")
    request_delay_millis: int = Field(100, ge=0, description="Пауза воркера после каждой страницы (мс).")
    timeout_millis: int = Field(30000, gt=0, description="Таймаут на один запрос (мс).")
    max_retries: int = Field(3, ge=0, description="Число повторных попыток при 5xx/429 и сетевых ошибках.")
    user_agent: str = Field("WebCrawler/1.0", description="Заголовок User-Agent.")

    @field_validator("user_agent")
    @classmethod
    def _user_agent_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("User agent cannot be blank")
        return v

    @property
    def request_delay(self) -> float:
        """Пауза между страницами в секундах."""
        return self.request_delay_millis / 1000

    @property
    def timeout(self) -> float:
        """Таймаут запроса в секундах."""
        return self.timeout_millis / 1000


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_data(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Читает YAML или JSON и возвращает сырой словарь настроек (без проверки схемы).
    ``None`` означает «файла нет» и даёт пустой словарь.
    """
    if path is None:
        return {}
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(
    path: Union[str, Path, None] = None,
    overrides: Mapping[str, Any] | None = None,
) -> CrawlerConfig:
    """
    Возвращает проверенный CrawlerConfig.

    Значения из файла *path* (если задан) перекрываются непустыми значениями
    из *overrides* (так CLI-опции побеждают конфиг). Ошибки схемы
    поднимаются как pydantic.ValidationError.
    """
    data = read_config_data(path)
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlerConfig(**data)
