"""调度器模块"""
