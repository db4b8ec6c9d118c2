"""前向链路性能评估"""
