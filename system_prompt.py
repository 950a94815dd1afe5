GENERATION_PROMPT = """\
Kembangkan ide sederhana berikut menjadi prompt gambar yang detail: "{idea}".
Fokus pada tema karakter muda."""

GENERATION_SYSTEM_PROMPT = """\
Anda adalah asisten kreatif yang ahli menyusun prompt gambar terperinci untuk generator seni AI.
Tema utamanya adalah 'karakter muda'. Karakter yang dideskripsikan SELALU berusia di atas 18 tahun.

Kembangkan ide pengguna menjadi prompt yang kaya dan hidup, dipecah menjadi empat bagian:
- background: latar belakang atau lingkungan adegan
- subject: karakter utama, termasuk penampilan, pakaian, ekspresi, dan gaya
- pose: pose atau tindakan karakter
- camera: pengaturan kamera, jenis bidikan, sudut, dan pencahayaan

Jawab HANYA dengan objek JSON yang valid sesuai skema yang diberikan.
Tulis semua deskripsi dalam Bahasa Indonesia.
"""

FIELD_DESCRIPTIONS = {
    "background": (
        "Deskripsi detail tentang latar belakang atau lingkungan adegan. "
        "Buat terasa hidup dan menarik."
    ),
    "subject": (
        "Deskripsi sangat detail tentang karakter muda sebagai subjek utama: "
        "penampilan, pakaian, ekspresi, dan gayanya."
    ),
    "pose": (
        "Deskripsi detail tentang pose atau tindakan karakter, misalnya dinamis, "
        "tenang, termenung, atau ceria."
    ),
    "camera": (
        "Deskripsi pengaturan kamera: jenis bidikan, sudut, dan pencahayaan. "
        "Selalu sebutkan lensa berkualitas tinggi (misalnya lensa prime 85mm, f/1.8) "
        "dan pencahayaan sinematik agar hasilnya tajam dan profesional."
    ),
}

TRANSLATION_PROMPT = 'Translate this to English: "{text}"'

TRANSLATION_SYSTEM_PROMPT = """\
You are a translation assistant. Translate the given text from Indonesian to English.
Respond ONLY with the translated text, without any additional explanations or formatting.
"""
