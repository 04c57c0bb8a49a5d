"""Infrastructure adapters - storage backends and analysis engines"""
