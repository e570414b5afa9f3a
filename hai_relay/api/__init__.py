"""对外 HTTP 层：路由 (app)、中继编排 (service) 与响应构造 (shaping)。"""
