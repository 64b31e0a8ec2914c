import logging
import tomllib
from dataclasses import dataclass, field, fields
from typing import Optional

logger = logging.getLogger(__name__)

@dataclass
class Config:
    user_agent: str = 'roundtrip/0.1'
    accept: str = '*/*'
    read_chunk_size: int = 65535
    proxy_addr: Optional[str] = None
    proxy_port: Optional[int] = None
    dns_override: dict[str, str] = field(default_factory=dict)

conf = Config()

def configure_from_file(path: Optional[str]):
    if path is not None:
        with open(path, "rb") as f:
            conf_override = tomllib.load(f)
    else:
        conf_override = {}

    known = {f.name for f in fields(Config)}
    for k, v in conf_override.items():
        if k not in known:
            raise ValueError(f"unknown config key: {k}")
        setattr(conf, k, v)

    logger.log(logging.DEBUG, f"config: {conf}")
