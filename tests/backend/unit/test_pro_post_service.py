import pytest

from sunmile.application import pro_post_service, professional_service, user_service
from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import AuthorizationError, NotFoundError, ValidationError
from sunmile.interfaces.api.schemas import (
    ProfessionalCreate,
    ProPostCreate,
    ProPostUpdate,
    UserCreate,
)


@pytest.fixture
def author(store, professional_payload):
    pro = professional_service.register_professional(
        ProfessionalCreate(**professional_payload())
    )
    return Identity(id=pro.user_id, role="pro")


@pytest.fixture
def post(author):
    return pro_post_service.create_post(
        author,
        ProPostCreate(title="Clareamento", content="Quando fazer", image_urls=["https://img/1.png"]),
    )


def test_create_post_links_callers_professional(store, author, post):
    assert post.professional.user_id == author.id
    assert post.image_urls == ["https://img/1.png"]
    assert store.posts[post.id].professional_id == post.professional_id


def test_create_post_defaults_images_to_empty_list(author):
    created = pro_post_service.create_post(author, ProPostCreate(title="T", content="C"))
    assert created.image_urls == []


@pytest.mark.parametrize("title,content", [(None, "C"), ("T", None), ("  ", "C"), ("T", "")])
def test_create_post_requires_title_and_content(store, author, title, content):
    with pytest.raises(ValidationError) as exc:
        pro_post_service.create_post(author, ProPostCreate(title=title, content=content))
    assert exc.value.message == "Título e conteúdo são obrigatórios"
    assert store.posts == {}


@pytest.mark.parametrize("image_urls", ["https://img/1.png", [1, 2], {"url": "x"}])
def test_create_post_rejects_malformed_image_urls(store, author, image_urls):
    with pytest.raises(ValidationError):
        pro_post_service.create_post(
            author, ProPostCreate(title="T", content="C", image_urls=image_urls)
        )
    assert store.posts == {}


def test_only_professionals_may_create_posts(store, user_payload):
    user = user_service.register_user(UserCreate(**user_payload()))

    with pytest.raises(AuthorizationError) as exc:
        pro_post_service.create_post(
            Identity(id=user.id, role="user"), ProPostCreate(title="T", content="C")
        )
    assert exc.value.message == "Apenas profissionais podem criar posts"


def test_owner_updates_only_supplied_fields(author, post):
    updated = pro_post_service.update_post(author, post.id, ProPostUpdate(title="Novo título"))

    assert updated.title == "Novo título"
    assert updated.content == post.content
    assert updated.image_urls == post.image_urls


def test_update_rejects_blank_title(author, post):
    with pytest.raises(ValidationError):
        pro_post_service.update_post(author, post.id, ProPostUpdate(title="   "))


def test_other_professional_cannot_touch_post(store, professional_payload, post):
    other = professional_service.register_professional(
        ProfessionalCreate(**professional_payload())
    )
    intruder = Identity(id=other.user_id, role="pro")

    with pytest.raises(AuthorizationError):
        pro_post_service.update_post(intruder, post.id, ProPostUpdate(title="Hack"))
    with pytest.raises(AuthorizationError):
        pro_post_service.delete_post(intruder, post.id)
    assert store.posts[post.id].title == "Clareamento"


def test_admin_can_update_and_delete_any_post(store, post):
    admin = Identity(id=999, role="admin")

    updated = pro_post_service.update_post(
        admin, post.id, ProPostUpdate(image_urls=["https://img/2.png"])
    )
    assert updated.image_urls == ["https://img/2.png"]

    pro_post_service.delete_post(admin, post.id)
    assert post.id not in store.posts


def test_missing_post_is_not_found(store, author):
    with pytest.raises(NotFoundError):
        pro_post_service.get_post(777)
    with pytest.raises(NotFoundError):
        pro_post_service.delete_post(author, 777)


def test_list_posts_in_creation_order(author):
    first = pro_post_service.create_post(author, ProPostCreate(title="A", content="a"))
    second = pro_post_service.create_post(author, ProPostCreate(title="B", content="b"))

    assert [p.id for p in pro_post_service.list_posts()] == [first.id, second.id]
