"""Configuration for the Jaeger backend."""

from typing import Self

from pydantic import BaseModel, Field, model_validator


class JaegerConfig(BaseModel):
    """Configuration for the Jaeger backend."""

    image: str = "jaegertracing/all-in-one:1.57"
    container_name: str = Field(default="jaeger", min_length=1)
    host: str = "localhost"
    query_port: int = Field(default=16686, ge=1, le=65535)
    otlp_grpc_port: int = Field(default=4317, ge=1, le=65535)
    admin_port: int = Field(default=14269, ge=1, le=65535)
    service_name: str = Field(default="trace-harness", min_length=1)
    timeout: float = Field(default=30.0, gt=0)
    interval: float = Field(default=0.5, gt=0)
    readiness_timeout: float = Field(default=30.0, gt=0)
    request_timeout: float = Field(default=5.0, gt=0)

    @model_validator(mode="after")
    def _check_interval(self) -> Self:
        if self.interval >= min(self.timeout, self.readiness_timeout):
            raise ValueError("interval must be shorter than both timeouts")
        return self
