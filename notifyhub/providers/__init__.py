"""平台提供者"""
