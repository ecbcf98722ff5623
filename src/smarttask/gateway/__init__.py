"""SmartTask Gateway -- FastAPI HTTP 入口"""
