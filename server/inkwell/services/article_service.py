# server/inkwell/services/article_service.py

import logging
from typing import Dict, Optional

from werkzeug.datastructures import FileStorage

from inkwell.errors import ApiError, NotFound, ValidationError, invalid_id
from inkwell.models.article import Article
from inkwell.models.comment import Comment
from inkwell.services.media_service import AVATAR_FOLDER, IMAGE_FOLDER
from inkwell.utils.helpers import clean_dict, is_valid_uuid, truncate_string
from inkwell.utils.slug import SlugGenerator
from inkwell.utils.validators import ContentValidator

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 280

SORT_FIELDS = {
    "created_at": Article.created_at,
    "views": Article.views,
    "likes": Article.likes,
    "title": Article.title,
}

IMAGE_FIELDS = {
    "avatar": ("avatar_url", "avatar_asset_ref", AVATAR_FOLDER),
    "img": ("image_url", "image_asset_ref", IMAGE_FOLDER),
}


class ArticleService:

    def __init__(self, store, media, categories, max_image_size: int = 5 * 1024 * 1024):
        self.store = store
        self.media = media
        self.categories = categories
        self.max_image_size = max_image_size

    def _read_images(self, files: Dict[str, FileStorage], required: bool) -> Dict[str, tuple]:
        images = {}
        errors = {}

        for field in IMAGE_FIELDS:
            file = files.get(field)
            if file is None or not file.filename:
                if required:
                    errors[field] = f"{field} image is required"
                continue

            is_valid, data, error = ContentValidator.validate_image(file, self.max_image_size)
            if not is_valid:
                errors[field] = error
            else:
                images[field] = (data, file.filename)

        if errors:
            raise ValidationError("Invalid image upload", details=errors)

        return images

    def _upload_images(self, images: Dict[str, tuple]) -> Dict[str, str]:
        if not images:
            return {}

        fields = list(images)
        assets = self.media.upload_many(
            (images[f][0], IMAGE_FIELDS[f][2], images[f][1]) for f in fields
        )

        values = {}
        for field, asset in zip(fields, assets):
            url_field, ref_field, _ = IMAGE_FIELDS[field]
            values[url_field] = asset.url
            values[ref_field] = asset.asset_ref
        return values

    def _slug_for(self, title: str, exclude_id: Optional[str] = None) -> str:
        base = SlugGenerator.slugify(title)

        def is_taken(candidate: str) -> bool:
            criteria = [Article.slug == candidate]
            if exclude_id:
                criteria.append(Article.id != exclude_id)
            return self.store.count(Article, *criteria) > 0

        return SlugGenerator.unique(base, is_taken, max_length=SLUG_MAX_LENGTH)

    def get(self, article_id: str) -> Article:
        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        article = self.store.find_by_id(Article, article_id)
        if article is None:
            raise NotFound("Article not found")
        return article

    def get_by_slug(self, slug: str) -> Article:
        slug = (slug or "").strip().lower()
        if not SlugGenerator.is_valid(slug):
            raise NotFound("Article not found")

        article = self.store.find_one(Article, slug=slug)
        if article is None:
            raise NotFound("Article not found")
        return article

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
    ):
        criteria = []

        if category:
            criteria.append(self.store.iexact(Article.category, category))

        if search:
            criteria.append(
                self.store.contains(Article.title, search) | self.store.contains(Article.description, search)
            )

        sort_col = SORT_FIELDS.get(sort, Article.created_at)
        if order == "asc":
            order_by = [sort_col.asc(), Article.id.asc()]
        else:
            order_by = [sort_col.desc(), Article.id.asc()]

        return self.store.paginate(Article, *criteria, order_by=order_by, page=page, limit=limit)

    def create(self, form: Dict, files: Dict[str, FileStorage]) -> Article:
        is_valid, fields, errors = ContentValidator.validate_article(form)
        if not is_valid:
            raise ValidationError("All fields are required", details=errors)

        images = self._read_images(files, required=True)
        slug = self._slug_for(fields["title"])

        image_values = self._upload_images(images)

        try:
            article = self.store.create(Article, slug=slug, **fields, **image_values)
        except ApiError:
            logger.error(
                "Article record not created, orphaned media assets: "
                f"{image_values.get('avatar_asset_ref')}, {image_values.get('image_asset_ref')}"
            )
            raise

        self.categories.adjust_article_count(article.category, 1)

        logger.info(f"Article created: {article.id} ({truncate_string(article.title, 50)})")
        return article

    def update(self, article_id: str, form: Dict, files: Dict[str, FileStorage]) -> Article:
        article = self.get(article_id)

        submitted = {k: form.get(k) for k in ContentValidator.ARTICLE_FIELDS}
        is_valid, fields, errors = ContentValidator.validate_article(clean_dict(submitted), partial=True)
        if not is_valid:
            raise ValidationError("Invalid article fields", details=errors)

        images = self._read_images(files, required=False)

        values = dict(fields)
        if "title" in fields and fields["title"] != article.title:
            values["slug"] = self._slug_for(fields["title"], exclude_id=article.id)

        old_category = article.category
        replaced_refs = [
            getattr(article, IMAGE_FIELDS[field][1]) for field in images
        ]

        values.update(self._upload_images(images))

        try:
            article = self.store.update_by_id(Article, article.id, values=values)
        except ApiError:
            logger.error(f"Article {article_id} update failed after uploading new media")
            raise

        if article is None:
            raise NotFound("Article not found")

        if replaced_refs:
            self.media.delete_many(replaced_refs)

        if "category" in fields and fields["category"].lower() != old_category.lower():
            self.categories.adjust_article_count(old_category, -1)
            self.categories.adjust_article_count(article.category, 1)

        logger.info(f"Article updated: {article.id} ({', '.join(sorted(values)) or 'no changes'})")
        return article

    def delete(self, article_id: str) -> dict:
        article = self.get(article_id)
        asset_refs = [article.avatar_asset_ref, article.image_asset_ref]

        pending = self.media.submit_deletes(asset_refs)
        try:
            deleted = self.store.delete_by_id(Article, article.id)
        finally:
            media_results = [f.result() for f in pending]

        if deleted is None:
            raise NotFound("Article not found")

        self.categories.adjust_article_count(deleted["category"], -1)
        removed_comments = self.store.delete_where(Comment, Comment.article_id == deleted["id"])

        logger.info(
            f"Article deleted: {deleted['id']} "
            f"(media removed: {sum(media_results)}/{len(media_results)}, comments removed: {removed_comments})"
        )
        return deleted
