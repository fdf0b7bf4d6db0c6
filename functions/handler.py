"""
Serverless entry point.

Mangum translates API Gateway / function-platform HTTP events into ASGI so the
FastAPI app runs unchanged as a function.
"""

from mangum import Mangum

from siteapi.app import app

handler = Mangum(app, lifespan="off")
