"""对外 API 服务。"""
