import azure.functions as func
from . import function_logic


def main(req: func.HttpRequest) -> func.HttpResponse:  # type: ignore
    return function_logic.handle(req)
