"""Translate ``Err`` results into HTTP responses."""

from fastapi.responses import JSONResponse

from storefront.result import Err, ErrorKind

STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INSUFFICIENT_STOCK: 409,
    ErrorKind.CONFLICT: 409,
    ErrorKind.EMPTY_CART: 422,
    ErrorKind.INVALID_INPUT: 422,
}


def error_response(err: Err) -> JSONResponse:
    return JSONResponse(status_code=STATUS_CODES[err.kind], content=err.to_dict())
