# API models package

from .request_model import GenerateInvoicesRequest, GenerateInvoicesResponse, parse_int_prefix

__all__ = ["GenerateInvoicesRequest", "GenerateInvoicesResponse", "parse_int_prefix"]
