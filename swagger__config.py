"""
Swagger/OpenAPI configuration for Barbershop Backend API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Barbershop Backend API",
        "description": "Database administration and dashboard API for the barbershop management app",
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/api",
    "schemes": ["http", "https"],
    "tags": [
        {"name": "Utility", "description": "Service status"},
        {"name": "Database", "description": "Connection checks, initialization and reset"},
        {"name": "Dashboard", "description": "Appointment and revenue statistics"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "error": {"type": "string", "example": "Failed to fetch dashboard stats"},
                "message": {"type": "string"},
            },
        },
        "TodayAppointments": {
            "type": "object",
            "properties": {
                "count": {"type": "integer", "example": 5},
                "pending": {"type": "integer", "example": 2},
                "confirmed": {"type": "integer", "example": 3},
            },
        },
        "DashboardStats": {
            "type": "object",
            "properties": {
                "todayAppointments": {"$ref": "#/definitions/TodayAppointments"},
                "totalAppointments": {"type": "integer", "example": 42},
                "totalCustomers": {"type": "integer", "example": 18},
                "newCustomers": {"type": "integer", "example": 4},
                "weeklyRevenue": {"type": "number", "format": "float", "example": 1250.0},
            },
        },
    },
}
