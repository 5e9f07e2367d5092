from fastapi import Request

from dbmreader.bootstrap import ReaderServices


def get_services(request: Request) -> ReaderServices:
    return request.app.state.services
