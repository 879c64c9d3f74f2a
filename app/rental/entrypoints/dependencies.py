from fastapi import Depends

from app.config import Config, get_config
from app.rental.service_layer.unit_of_work import AbstractUnitOfWork, HttpUnitOfWork


def rental_uow(cfg: Config = Depends(get_config)) -> AbstractUnitOfWork:
    return HttpUnitOfWork(cfg.API_BASE_URL, cfg.REDIS_DSN, cfg.API_TIMEOUT)
