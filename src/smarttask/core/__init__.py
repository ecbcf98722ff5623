"""SmartTask Core -- 领域模型、Prompt 构建、响应清洗、后端协作者"""
