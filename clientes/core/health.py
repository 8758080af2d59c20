"""
Health and metrics endpoints.

Liveness never depends on the database, so the process stays observable
while it runs without a store connection; readiness reports the store as
failing in that case.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Any, Optional
import os
import time
from datetime import datetime
from enum import Enum
import psutil
import logging

from clientes.infrastructure.guard import ConnectionGuard, UNAVAILABLE, get_guard

logger = logging.getLogger(__name__)

def _now() -> str:
    return datetime.utcnow().isoformat() + "Z"

def _ping(db) -> Optional[SQLAlchemyError]:
    try:
        db.execute(text("SELECT 1")).scalar()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        return e
    return None

class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"

class ServiceHealth:
    def __init__(self, service_name: str, version: str = "1.0.0"):
        self.service_name = service_name
        self.version = version
        self.start_time = time.time()
        self.checks_performed = 0
        self.last_check_time = None

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health", status_code=status.HTTP_200_OK)
        async def health_check() -> Dict[str, Any]:
            """Liveness summary, independent of the database"""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "timestamp": _now()
            }

        @router.get("/health/live", status_code=status.HTTP_200_OK)
        async def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        def readiness(guard: ConnectionGuard = Depends(get_guard)) -> JSONResponse:
            """Readiness probe: 200 only when every check passes"""
            checks = self.perform_readiness_checks(guard)
            overall_status = self.calculate_overall_status(checks)
            status_code = status.HTTP_200_OK if overall_status == HealthStatus.PASS else status.HTTP_503_SERVICE_UNAVAILABLE

            return JSONResponse(status_code=status_code, content={
                "status": overall_status.value,
                "version": self.version,
                "releaseId": os.getenv("RELEASE_ID", "unknown"),
                "checks": checks,
                "serviceId": self.service_name,
                "description": f"{self.service_name} microservice",
                "timestamp": _now()
            })

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            memory = process.memory_info()

            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": time.time() - self.start_time,
                "checks_performed": self.checks_performed,
                "timestamp": _now(),
                "system": {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads()
                }
            }

        return router

    def perform_readiness_checks(self, guard: ConnectionGuard) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1
        self.last_check_time = time.time()

        return {
            "database:connectivity": self._check_database(guard),
            "storage:disk_space": self._check_disk_space(),
            "system:memory": self._check_memory(),
        }

    def _check_database(self, guard: ConnectionGuard) -> Dict[str, Any]:
        """Round-trip a SELECT 1 through the guard"""
        start_time = time.time()
        error = guard.with_connection(_ping)

        if error is UNAVAILABLE:
            return {
                "status": HealthStatus.FAIL.value,
                "componentType": "datastore",
                "output": f"database unavailable ({guard.reason})",
                "time": _now()
            }
        if error is not None:
            logger.error(f"Database health check failed: {error}")
            return {
                "status": HealthStatus.FAIL.value,
                "componentType": "datastore",
                "output": type(error).__name__,
                "time": _now()
            }

        response_time = (time.time() - start_time) * 1000
        return {
            "status": HealthStatus.PASS.value,
            "componentType": "datastore",
            "observedValue": f"{response_time:.2f}",
            "observedUnit": "ms",
            "time": _now()
        }

    def _check_disk_space(self) -> Dict[str, Any]:
        try:
            free_gb = psutil.disk_usage('/').free / (1024 ** 3)
        except OSError as e:
            return {"status": HealthStatus.WARN.value, "componentType": "system", "output": str(e), "time": _now()}

        if free_gb < 1:
            status_val = HealthStatus.FAIL
        elif free_gb < 5:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS

        return {
            "status": status_val.value,
            "componentType": "system",
            "observedValue": f"{free_gb:.2f}",
            "observedUnit": "GB",
            "time": _now()
        }

    def _check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / (1024 ** 2)

        if available_mb < 100:
            status_val = HealthStatus.FAIL
        elif available_mb < 500:
            status_val = HealthStatus.WARN
        else:
            status_val = HealthStatus.PASS

        return {
            "status": status_val.value,
            "componentType": "system",
            "observedValue": f"{available_mb:.2f}",
            "observedUnit": "MB",
            "time": _now()
        }

    def calculate_overall_status(self, checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = [check.get("status", HealthStatus.PASS.value) for check in checks.values()]

        if HealthStatus.FAIL.value in statuses:
            return HealthStatus.FAIL
        elif HealthStatus.WARN.value in statuses:
            return HealthStatus.WARN
        return HealthStatus.PASS
