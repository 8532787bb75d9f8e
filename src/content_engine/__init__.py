# Content Engine
"""
Article generation and multi-channel publishing:
- topic_queue: plain-text queue of pending article topics
- content_writer: OpenAI-powered article, SEO and promo copy generation
- publisher: HTML post-processing, external links, Shopify publishing, pipeline
- image_producer: fal.ai featured image generation
- social: X/Twitter, Facebook and Instagram fan-out
- newsletter: Mailchimp campaign dispatch
"""
