PROJECT_NAME = "MindLoop-AI"
API_V1_STR = "/api/v1"
VERSION = "0.1.0"
