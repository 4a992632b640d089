"""文本工具：排版、HTML清洗、User-Agent解析、疾病表条款导入"""
