"""
News Module
===========

Request and response schemas for the News resource and the transformer that
maps stored records to their public shape.
"""
